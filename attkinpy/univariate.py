"""Univariate derivatives with respect to time.

`UnivariateDerivative` holds f, f' and f'' (up to its order) where each
coefficient may itself be a float or a `DerivativeStructure`. It is the
explicit encoding used to hand a rotation and its time derivatives to
sensitivity code, and it lets the interpolator carry time derivatives
through the logarithmic and exponential maps.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from attkinpy import scalar
from attkinpy.errors import MalformedInputError, MismatchedFieldError
from attkinpy.fields import FieldElement, UnivariateField, field_of


class UnivariateDerivative(FieldElement):
    __array_ufunc__ = None

    def __init__(self, coefficients: Sequence) -> None:
        coefficients = tuple(coefficients)
        if not 1 <= len(coefficients) <= 3:
            raise MalformedInputError(f"univariate derivatives support orders 0 to 2, got {len(coefficients) - 1}")
        self._c: Tuple = coefficients

    @classmethod
    def constant(cls, value, order: int) -> "UnivariateDerivative":
        zero = 0.0 * value
        return cls((value,) + (zero,) * order)

    @property
    def order(self) -> int:
        return len(self._c) - 1

    @property
    def coefficients(self) -> Tuple:
        return self._c

    @property
    def value(self):
        return self._c[0]

    @property
    def field(self) -> UnivariateField:
        return UnivariateField(order=self.order, base=field_of(self._c[0]))

    @property
    def real(self) -> float:
        return scalar.real(self._c[0])

    def derivative(self, k: int):
        if not 0 <= k <= self.order:
            raise MalformedInputError(f"derivative order {k} not available in order {self.order} structure")
        return self._c[k]

    def is_finite(self) -> bool:
        return all(scalar.is_finite(c) for c in self._c)

    def _coerce(self, other):
        if isinstance(other, UnivariateDerivative):
            if other.order != self.order:
                raise MismatchedFieldError(self.field, other.field)
            return other
        if isinstance(other, FieldElement) or scalar.is_scalar(other):
            return UnivariateDerivative.constant(other, self.order)
        return None

    def _chain(self, f0, f1, f2) -> "UnivariateDerivative":
        c = self._c
        out = [f0]
        if self.order >= 1:
            out.append(f1 * c[1])
        if self.order >= 2:
            out.append(f1 * c[2] + f2 * c[1] * c[1])
        return UnivariateDerivative(out)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return UnivariateDerivative([a + b for a, b in zip(self._c, other._c)])

    __radd__ = __add__

    def __neg__(self):
        return UnivariateDerivative([-a for a in self._c])

    def __pos__(self):
        return self

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return UnivariateDerivative([a - b for a, b in zip(self._c, other._c)])

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other - self

    def __mul__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        a, b = self._c, other._c
        out = [a[0] * b[0]]
        if self.order >= 1:
            out.append(a[0] * b[1] + a[1] * b[0])
        if self.order >= 2:
            out.append(a[0] * b[2] + 2.0 * (a[1] * b[1]) + a[2] * b[0])
        return UnivariateDerivative(out)

    __rmul__ = __mul__

    def reciprocal(self) -> "UnivariateDerivative":
        inv = 1.0 / self._c[0]
        inv2 = inv * inv
        return self._chain(inv, -inv2, 2.0 * inv2 * inv)

    def __truediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self * other.reciprocal()

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other * self.reciprocal()

    def __abs__(self):
        return -self if self.real < 0 else self

    # ------------------------------------------------------------------
    # Elementary functions
    # ------------------------------------------------------------------

    def sqrt(self) -> "UnivariateDerivative":
        root = scalar.sqrt(self._c[0])
        if scalar.real(root) == 0.0:
            return UnivariateDerivative.constant(root, self.order)
        f1 = 0.5 / root
        return self._chain(root, f1, -f1 * f1 / root)

    def sin(self) -> "UnivariateDerivative":
        s, c = scalar.sin(self._c[0]), scalar.cos(self._c[0])
        return self._chain(s, c, -s)

    def cos(self) -> "UnivariateDerivative":
        s, c = scalar.sin(self._c[0]), scalar.cos(self._c[0])
        return self._chain(c, -s, -c)

    def arctan(self) -> "UnivariateDerivative":
        v = self._c[0]
        f1 = 1.0 / (1.0 + v * v)
        return self._chain(scalar.arctan(v), f1, -2.0 * v * f1 * f1)

    def arctan2(self, x) -> "UnivariateDerivative":
        """Four-quadrant arc tangent of `self / x`."""
        x = self._coerce(x)
        if x is None:
            raise MalformedInputError("arctan2 expects a scalar or a univariate derivative")

        y0, x0 = self._c[0], x._c[0]
        out = [scalar.arctan2(y0, x0)]
        if self.order >= 1:
            r2 = x0 * x0 + y0 * y0
            d1 = (x0 * self._c[1] - y0 * x._c[1]) / r2
            out.append(d1)
        if self.order >= 2:
            n2 = x0 * self._c[2] - y0 * x._c[2]
            dr2 = 2.0 * (x0 * x._c[1] + y0 * self._c[1])
            out.append((n2 - d1 * dr2) / r2)
        return UnivariateDerivative(out)

    # ------------------------------------------------------------------
    # Comparison by real part
    # ------------------------------------------------------------------

    def __lt__(self, other):
        return self.real < scalar.real(other)

    def __le__(self, other):
        return self.real <= scalar.real(other)

    def __gt__(self, other):
        return self.real > scalar.real(other)

    def __ge__(self, other):
        return self.real >= scalar.real(other)

    def __repr__(self) -> str:
        return f"UnivariateDerivative({list(self._c)!r})"
