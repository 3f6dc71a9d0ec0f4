"""Generic scalar functions.

Every algorithm is written once against these functions, which accept
plain floats and any `FieldElement` (derivative structures, univariate
derivatives) alike.
"""

from __future__ import annotations

import numbers
from typing import Any

import numpy as np

from attkinpy.fields import FieldElement, field_of  # noqa: F401


def is_scalar(x: Any) -> bool:
    return isinstance(x, (numbers.Real, FieldElement))


def real(x: Any) -> float:
    if isinstance(x, FieldElement):
        return x.real
    return float(x)


def is_finite(x: Any) -> bool:
    if isinstance(x, FieldElement):
        return x.is_finite()
    return bool(np.isfinite(x))


def sqrt(x):
    if isinstance(x, FieldElement):
        return x.sqrt()
    return np.sqrt(x)


def sin(x):
    if isinstance(x, FieldElement):
        return x.sin()
    return np.sin(x)


def cos(x):
    if isinstance(x, FieldElement):
        return x.cos()
    return np.cos(x)


def arctan(x):
    if isinstance(x, FieldElement):
        return x.arctan()
    return np.arctan(x)


def arctan2(y, x):
    if isinstance(y, FieldElement):
        return y.arctan2(x)
    if isinstance(x, FieldElement):
        # promote y into x's field before taking the angle
        return (0.0 * x + y).arctan2(x)
    return np.arctan2(y, x)
