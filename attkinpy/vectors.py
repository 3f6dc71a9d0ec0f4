"""3-vector helpers working on numpy arrays of floats or field elements.

Vectors are numpy arrays of shape (3,). When their components are field
elements the array dtype is `object`; scaling by a field element is done
component by component because numpy cannot broadcast such scalars.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from attkinpy import scalar
from attkinpy.errors import MalformedInputError
from attkinpy.fields import REAL_FIELD, field_of, resolve_field


def vector(components: Iterable) -> np.ndarray:
    """Build a read-only (3,) array from any sequence of scalars."""
    components = list(components)
    if len(components) != 3:
        raise MalformedInputError(f"a vector needs 3 components, got {len(components)}")
    if not all(scalar.is_scalar(c) for c in components):
        raise MalformedInputError(f"vector components must be scalars, got {components!r}")

    if any(field_of(c) != REAL_FIELD for c in components):
        out = np.empty(3, dtype=object)
        out[:] = components
    else:
        out = np.array([float(c) for c in components])
    out.flags.writeable = False
    return out


def zero_vector(field=REAL_FIELD) -> np.ndarray:
    return vector([field.zero] * 3)


def field_of_vector(v: Sequence):
    return resolve_field(*(field_of(c) for c in v))


def scale(k, v: Sequence) -> np.ndarray:
    return vector([k * c for c in v])


def add(*vectors: Sequence) -> np.ndarray:
    return vector([sum(components[1:], components[0]) for components in zip(*vectors)])


def subtract(u: Sequence, v: Sequence) -> np.ndarray:
    return vector([a - b for a, b in zip(u, v)])


def negate(v: Sequence) -> np.ndarray:
    return vector([-c for c in v])


def dot(u: Sequence, v: Sequence):
    return u[0] * v[0] + u[1] * v[1] + u[2] * v[2]


def cross(u: Sequence, v: Sequence) -> np.ndarray:
    return vector([
        u[1] * v[2] - u[2] * v[1],
        u[2] * v[0] - u[0] * v[2],
        u[0] * v[1] - u[1] * v[0],
    ])


def norm_sq(v: Sequence):
    return dot(v, v)


def norm(v: Sequence):
    n2 = norm_sq(v)
    if scalar.real(n2) == 0.0:
        # the norm is not differentiable at the origin, use its limit value
        return 0.0 * n2
    return scalar.sqrt(n2)


def real_vector(v: Sequence) -> np.ndarray:
    return vector([scalar.real(c) for c in v])


def distance(u: Sequence, v: Sequence):
    return norm(subtract(u, v))


def is_finite(v: Sequence) -> bool:
    return all(scalar.is_finite(c) for c in v)
