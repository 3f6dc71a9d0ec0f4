"""Offset algebra.

A state `B` given relative to the frame produced by a state `A` (A maps
the reference frame to F1, B maps F1 to F2) combines with it into the
state mapping the reference frame to F2:

    rotation     = A.rotation then B.rotation
    rate         = B.rate + B.rotation(A.rate)
    acceleration = B.acceleration + B.rotation(A.acceleration)
                   - B.rate x B.rotation(A.rate)

The cross term is the derivative of the rotating transform: F1 coordinates
seen from F2 drift at -B.rate x (.). Composition is associative but not
commutative.
"""

from attkinpy import vectors
from attkinpy.fields import resolve_field
from attkinpy.state import KinematicState


def add_offset(a: KinematicState, b: KinematicState) -> KinematicState:
    resolve_field(a.field, b.field)

    r_b = b.rotation
    transported_rate = r_b.apply_to(a.rate)
    transported_acceleration = r_b.apply_to(a.acceleration)
    return KinematicState(
        a.date,
        a.rotation.compose(r_b),
        vectors.add(b.rate, transported_rate),
        vectors.subtract(
            vectors.add(b.acceleration, transported_acceleration),
            vectors.cross(b.rate, transported_rate),
        ),
    )


def revert(a: KinematicState) -> KinematicState:
    """State such that `add_offset(a, revert(a))` is the identity."""
    r = a.rotation
    return KinematicState(
        a.date,
        r.invert(),
        vectors.negate(r.apply_inverse_to(a.rate)),
        vectors.negate(r.apply_inverse_to(a.acceleration)),
    )


def subtract_offset(a: KinematicState, b: KinematicState) -> KinematicState:
    """Undo `add_offset(., b)`: `subtract_offset(add_offset(a, b), b) == a`."""
    return add_offset(a, revert(b))
