"""Polynomial interpolation through values and derivatives.

Sample points may carry any number of derivatives; a point with `k`
derivatives counts as `k + 1` coincident abscissae in the Newton divided
differences table. Values are 1-D numpy arrays of floats or field elements.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from attkinpy.errors import MalformedInputError, NotEnoughDataError


def _as_array(value: Sequence) -> np.ndarray:
    value = np.asarray(value)
    if value.dtype == object:
        return np.array(value, dtype=object)
    return np.array(value, dtype=float)


class HermiteInterpolator():
    def __init__(self) -> None:
        self.abscissae: List[float] = []
        self.top_diagonal: List[np.ndarray] = []
        self.bottom_diagonal: List[np.ndarray] = []

    def add_sample_point(self, x: float, value: Sequence, *derivatives: Sequence) -> None:
        """Add a sample point with its value and first derivatives.

        Args:
            x: abscissa, must differ from every abscissa already added
            value: value of the function at x
            derivatives: first, second... derivatives at x
        """
        x = float(x)
        if x in self.abscissae:
            raise MalformedInputError(f"duplicated abscissa {x}")

        factorial = 1.0
        for i, y in enumerate((value,) + derivatives):
            y = _as_array(y)
            if self.top_diagonal and y.shape != self.top_diagonal[0].shape:
                raise MalformedInputError(
                    f"sample dimension {y.shape} does not match {self.top_diagonal[0].shape}"
                )
            if i > 1:
                factorial *= i
                y = y * (1.0 / factorial)

            n = len(self.abscissae)
            self.bottom_diagonal.insert(n - i, y)
            bottom0 = y
            for j in range(i, n):
                index = n - (j + 1)
                inv = 1.0 / (x - self.abscissae[index])
                bottom1 = (bottom0 - self.bottom_diagonal[index]) * inv
                self.bottom_diagonal[index] = bottom1
                bottom0 = bottom1

            self.top_diagonal.append(bottom0)
            self.abscissae.append(x)

    def _check_interpolation(self) -> None:
        if not self.abscissae:
            raise NotEnoughDataError(1, 0)

    def value(self, x: float) -> np.ndarray:
        self._check_interpolation()

        value = None
        value_coeff = 1.0
        for abscissa, divided_difference in zip(self.abscissae, self.top_diagonal):
            term = divided_difference * value_coeff
            value = term if value is None else value + term
            value_coeff *= x - abscissa
        return value

    def derivatives(self, x: float, order: int) -> List[np.ndarray]:
        """Value and derivatives up to `order` at x, as a list [f(x), f'(x), ...]."""
        self._check_interpolation()
        if order < 0:
            raise MalformedInputError(f"derivation order must be non-negative, got {order}")

        derivatives = [None] * (order + 1)
        value_coeff = [1.0] + [0.0] * order
        for abscissa, divided_difference in zip(self.abscissae, self.top_diagonal):
            delta_x = x - abscissa
            for j in range(order, -1, -1):
                term = divided_difference * value_coeff[j]
                derivatives[j] = term if derivatives[j] is None else derivatives[j] + term
                value_coeff[j] *= delta_x
                if j > 0:
                    value_coeff[j] += j * value_coeff[j - 1]
        return derivatives
