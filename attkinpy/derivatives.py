"""Multivariate derivative structures up to second order.

A `DerivativeStructure` carries a value together with its gradient
(order >= 1) and Hessian (order 2) with respect to the free parameters of
its `DerivativeField`. Arithmetic and elementary functions propagate the
derivatives with the chain rule:

    f(a)'  = f1 * a'
    f(a)'' = f1 * a'' + f2 * a' a'^T

where f1 and f2 are the first and second derivatives of f at a's value.
"""

from __future__ import annotations

import numbers
from typing import Optional

import numpy as np

from attkinpy.errors import MalformedInputError, MismatchedFieldError
from attkinpy.fields import DerivativeField, FieldElement


class DerivativeStructure(FieldElement):
    # let numpy scalars defer to our reflected operators
    __array_ufunc__ = None
    __slots__ = ("field", "value", "gradient", "hessian")

    def __init__(
        self,
        field: DerivativeField,
        value: float,
        gradient: Optional[np.ndarray] = None,
        hessian: Optional[np.ndarray] = None
    ) -> None:
        self.field = field
        self.value = float(value)
        n = field.parameters

        if field.order >= 1:
            self.gradient = np.zeros(n) if gradient is None else np.asarray(gradient, dtype=float).reshape(n)
        else:
            self.gradient = None

        if field.order >= 2:
            self.hessian = np.zeros((n, n)) if hessian is None else np.asarray(hessian, dtype=float).reshape(n, n)
        else:
            self.hessian = None

    @property
    def real(self) -> float:
        return self.value

    @property
    def order(self) -> int:
        return self.field.order

    def get_partial_derivative(self, *orders: int) -> float:
        """Partial derivative with respect to the parameters.

        `orders` gives the derivation order for each parameter, e.g.
        `get_partial_derivative(1, 0, 1)` is d2/dp0dp2.
        """
        if len(orders) != self.field.parameters:
            raise MalformedInputError(f"expected {self.field.parameters} orders, got {len(orders)}")
        if any(o < 0 for o in orders):
            raise MalformedInputError(f"negative derivation order in {orders}")

        total = sum(orders)
        if total > self.field.order:
            raise MalformedInputError(f"derivation order {total} exceeds field order {self.field.order}")

        if total == 0:
            return self.value
        indices = [i for i, o in enumerate(orders) for _ in range(o)]
        if total == 1:
            return float(self.gradient[indices[0]])
        return float(self.hessian[indices[0], indices[1]])

    def is_finite(self) -> bool:
        if not np.isfinite(self.value):
            return False
        if self.gradient is not None and not np.all(np.isfinite(self.gradient)):
            return False
        if self.hessian is not None and not np.all(np.isfinite(self.hessian)):
            return False
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _coerce(self, other):
        if isinstance(other, DerivativeStructure):
            if other.field != self.field:
                raise MismatchedFieldError(self.field, other.field)
            return other
        if isinstance(other, numbers.Real):
            return DerivativeStructure(self.field, float(other))
        return None

    def _chain(self, f0: float, f1: float, f2: float) -> "DerivativeStructure":
        gradient = hessian = None
        if self.gradient is not None:
            gradient = f1 * self.gradient
        if self.hessian is not None:
            hessian = f1 * self.hessian + f2 * np.outer(self.gradient, self.gradient)
        return DerivativeStructure(self.field, f0, gradient, hessian)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def __add__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        gradient = None if self.gradient is None else self.gradient + other.gradient
        hessian = None if self.hessian is None else self.hessian + other.hessian
        return DerivativeStructure(self.field, self.value + other.value, gradient, hessian)

    __radd__ = __add__

    def __neg__(self):
        gradient = None if self.gradient is None else -self.gradient
        hessian = None if self.hessian is None else -self.hessian
        return DerivativeStructure(self.field, -self.value, gradient, hessian)

    def __pos__(self):
        return self

    def __sub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self + (-other)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other + (-self)

    def __mul__(self, other):
        if isinstance(other, numbers.Real):
            k = float(other)
            gradient = None if self.gradient is None else k * self.gradient
            hessian = None if self.hessian is None else k * self.hessian
            return DerivativeStructure(self.field, k * self.value, gradient, hessian)

        other = self._coerce(other)
        if other is None:
            return NotImplemented

        a, b = self, other
        gradient = hessian = None
        if a.gradient is not None:
            gradient = a.value * b.gradient + b.value * a.gradient
        if a.hessian is not None:
            cross = np.outer(a.gradient, b.gradient)
            hessian = a.value * b.hessian + b.value * a.hessian + cross + cross.T
        return DerivativeStructure(self.field, a.value * b.value, gradient, hessian)

    __rmul__ = __mul__

    def reciprocal(self) -> "DerivativeStructure":
        inv = 1.0 / self.value
        return self._chain(inv, -inv * inv, 2.0 * inv * inv * inv)

    def __truediv__(self, other):
        if isinstance(other, numbers.Real):
            return self * (1.0 / float(other))
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return self * other.reciprocal()

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is None:
            return NotImplemented
        return other * self.reciprocal()

    def __pow__(self, exponent):
        if not isinstance(exponent, numbers.Real):
            return NotImplemented
        p = float(exponent)
        if p == 0.0:
            return DerivativeStructure(self.field, 1.0)
        if p == 1.0:
            return self
        if p == 2.0:
            return self * self
        v = self.value
        return self._chain(v ** p, p * v ** (p - 1), p * (p - 1) * v ** (p - 2))

    def __abs__(self):
        return -self if self.value < 0 else self

    # ------------------------------------------------------------------
    # Elementary functions
    # ------------------------------------------------------------------

    def sqrt(self) -> "DerivativeStructure":
        root = np.sqrt(self.value)
        if root == 0.0:
            # derivatives are unbounded at 0, keep the value only
            return DerivativeStructure(self.field, 0.0)
        return self._chain(root, 0.5 / root, -0.25 / (root * self.value))

    def sin(self) -> "DerivativeStructure":
        s, c = np.sin(self.value), np.cos(self.value)
        return self._chain(s, c, -s)

    def cos(self) -> "DerivativeStructure":
        s, c = np.sin(self.value), np.cos(self.value)
        return self._chain(c, -s, -c)

    def tan(self) -> "DerivativeStructure":
        t = np.tan(self.value)
        f1 = 1.0 + t * t
        return self._chain(t, f1, 2.0 * t * f1)

    def exp(self) -> "DerivativeStructure":
        e = np.exp(self.value)
        return self._chain(e, e, e)

    def log(self) -> "DerivativeStructure":
        inv = 1.0 / self.value
        return self._chain(np.log(self.value), inv, -inv * inv)

    def arctan(self) -> "DerivativeStructure":
        v = self.value
        f1 = 1.0 / (1.0 + v * v)
        return self._chain(np.arctan(v), f1, -2.0 * v * f1 * f1)

    def arcsin(self) -> "DerivativeStructure":
        v = self.value
        d = 1.0 - v * v
        f1 = 1.0 / np.sqrt(d)
        return self._chain(np.arcsin(v), f1, v * f1 / d)

    def arccos(self) -> "DerivativeStructure":
        v = self.value
        d = 1.0 - v * v
        f1 = 1.0 / np.sqrt(d)
        return self._chain(np.arccos(v), -f1, -v * f1 / d)

    def arctan2(self, x) -> "DerivativeStructure":
        """Four-quadrant arc tangent of `self / x`."""
        y = self
        x = self._coerce(x)
        if x is None:
            raise MalformedInputError("arctan2 expects a real number or a derivative structure")

        theta = np.arctan2(y.value, x.value)
        if abs(x.value) >= abs(y.value):
            # theta = atan(y / x) + k pi, the constant does not change derivatives
            base = (y / x).arctan()
        else:
            # theta = -atan(x / y) +/- pi / 2
            base = -(x / y).arctan()
        return DerivativeStructure(self.field, theta, base.gradient, base.hessian)

    # ------------------------------------------------------------------
    # Comparison by real part
    # ------------------------------------------------------------------

    @staticmethod
    def _real(other) -> float:
        return other.value if isinstance(other, DerivativeStructure) else float(other)

    def __lt__(self, other):
        return self.value < self._real(other)

    def __le__(self, other):
        return self.value <= self._real(other)

    def __gt__(self, other):
        return self.value > self._real(other)

    def __ge__(self, other):
        return self.value >= self._real(other)

    def __repr__(self) -> str:
        parts = [f"value={self.value!r}"]
        if self.gradient is not None:
            parts.append(f"gradient={self.gradient.tolist()!r}")
        if self.hessian is not None:
            parts.append(f"hessian={self.hessian.tolist()!r}")
        return f"DerivativeStructure({', '.join(parts)})"
