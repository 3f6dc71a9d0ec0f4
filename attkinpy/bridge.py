"""Conversions between plain states, field states and derivative encodings.

A derivative encoding replaces rate and acceleration by the time
derivatives of the quaternion components:

    q'  = 1/2 q * (w, 0)
    q'' = 1/2 (q' * (w, 0) + q * (a, 0))

and the inverse mapping recovers w = vec(2 q~ * q') and a = vec(2 q~ * q'').
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from attkinpy import vectors
from attkinpy.derivatives import DerivativeStructure
from attkinpy.errors import MalformedInputError, MismatchedFieldError
from attkinpy.fields import REAL_FIELD, DerivativeField, FieldElement
from attkinpy.state import KinematicState
from attkinpy.transformations import (
    Rotation,
    _quaternion,
    pure_quaternion,
    quaternion_conjugate,
    quaternion_multiply,
)
from attkinpy.type_utils import Date, require_type
from attkinpy.univariate import UnivariateDerivative

MAX_ENCODING_ORDER = 2


def _check_order(order: int) -> None:
    if not 0 <= order <= MAX_ENCODING_ORDER:
        raise MalformedInputError(f"derivative encodings support orders 0 to {MAX_ENCODING_ORDER}, got {order}")


def lift_to_field(field, state: KinematicState) -> KinematicState:
    """Turn the plain components of `state` into constants of `field`."""
    if state.field != REAL_FIELD and state.field != field:
        raise MismatchedFieldError(state.field, field)

    def lift(c):
        return c if isinstance(c, FieldElement) else field.constant(c)

    return KinematicState(
        state.date,
        Rotation._trusted(_quaternion([lift(c) for c in state.rotation.quaternion])),
        vectors.vector([lift(c) for c in state.rate]),
        vectors.vector([lift(c) for c in state.acceleration]),
    )


def to_plain(state: KinematicState) -> KinematicState:
    return KinematicState(
        state.date,
        state.rotation.to_plain(),
        vectors.real_vector(state.rate),
        vectors.real_vector(state.acceleration),
    )


class DerivativeEncoding():
    """Time-stamped quaternion whose components carry their time derivatives."""

    def __init__(self, date: Date, quaternion: Sequence, order: int) -> None:
        require_type(date, Date, "date")
        _check_order(order)
        if len(quaternion) != 4:
            raise MalformedInputError(f"a quaternion needs 4 components, got {len(quaternion)}")
        for c in quaternion:
            if not isinstance(c, (UnivariateDerivative, DerivativeStructure)):
                raise MalformedInputError(f"encoding components must carry derivatives, got {type(c).__name__}")
            if _available_order(c) < order:
                raise MalformedInputError(f"component {c!r} does not carry order {order} derivatives")

        self._date = date
        self._quaternion = _quaternion(quaternion)
        self._order = order

    @property
    def date(self):
        return self._date

    @property
    def quaternion(self) -> np.ndarray:
        return self._quaternion

    @property
    def order(self) -> int:
        return self._order

    def derivative(self, k: int) -> np.ndarray:
        """k-th time derivative of the quaternion, as a (4,) array."""
        if not 0 <= k <= self._order:
            raise MalformedInputError(f"derivative order {k} not available in order {self._order} encoding")
        return _quaternion([_coefficient(c, k) for c in self._quaternion])

    def __repr__(self) -> str:
        return f"DerivativeEncoding(date={self._date!r}, order={self._order}, quaternion={self._quaternion.tolist()!r})"


def _available_order(c) -> int:
    if isinstance(c, UnivariateDerivative):
        return c.order
    # derivative structures are read with respect to their single parameter
    if c.field.parameters != 1:
        return -1
    return c.order


def _coefficient(c, k: int):
    if isinstance(c, UnivariateDerivative):
        return c.derivative(k)
    return c.get_partial_derivative(k)


def _quaternion_derivatives(state: KinematicState, order: int):
    q = state.rotation.quaternion
    out = [q]
    if order >= 1:
        omega = pure_quaternion(state.rate)
        q_dot = quaternion_multiply(q, omega)
        q_dot = _quaternion([0.5 * c for c in q_dot])
        out.append(q_dot)
        if order >= 2:
            q_ddot = [
                0.5 * (a + b)
                for a, b in zip(quaternion_multiply(q_dot, omega),
                                quaternion_multiply(q, pure_quaternion(state.acceleration)))
            ]
            out.append(_quaternion(q_ddot))
    return out


def to_derivative_encoding(state: KinematicState, order: int) -> DerivativeEncoding:
    """Encode `state` with `UnivariateDerivative` quaternion components."""
    _check_order(order)
    derivatives = _quaternion_derivatives(state, order)
    components = [UnivariateDerivative([d[i] for d in derivatives]) for i in range(4)]
    return DerivativeEncoding(state.date, components, order)


def to_derivative_structure(state: KinematicState, order: int) -> DerivativeEncoding:
    """Encode a plain `state` with one-parameter `DerivativeStructure` components."""
    _check_order(order)
    if state.field != REAL_FIELD:
        raise MalformedInputError(f"derivative structure encoding needs a plain state, got field {state.field}")

    field = DerivativeField(parameters=1, order=order)
    derivatives = _quaternion_derivatives(state, order)
    components = []
    for i in range(4):
        gradient = [derivatives[1][i]] if order >= 1 else None
        hessian = [[derivatives[2][i]]] if order >= 2 else None
        components.append(DerivativeStructure(field, derivatives[0][i], gradient, hessian))
    return DerivativeEncoding(state.date, components, order)


def from_derivative_encoding(encoding: DerivativeEncoding) -> KinematicState:
    """Decode rotation, rate and acceleration; missing orders give zero vectors."""
    q = encoding.derivative(0)
    rotation = Rotation(q)
    q_conj = quaternion_conjugate(q)

    rate = acceleration = None
    if encoding.order >= 1:
        rate = vectors.scale(2.0, quaternion_multiply(q_conj, encoding.derivative(1))[:3])
    if encoding.order >= 2:
        acceleration = vectors.scale(2.0, quaternion_multiply(q_conj, encoding.derivative(2))[:3])

    field = rotation.field
    if rate is None:
        rate = vectors.zero_vector(field)
    if acceleration is None:
        acceleration = vectors.zero_vector(field)
    return KinematicState(encoding.date, rotation, rate, acceleration)