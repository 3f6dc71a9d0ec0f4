from attkinpy import scalar, vectors
from attkinpy.dates import shift_date
from attkinpy.errors import MalformedInputError
from attkinpy.fields import field_of, resolve_field
from attkinpy.state import KinematicState
from attkinpy.transformations import Rotation, log_quaternion, quaternion_multiply


def shifted_by(state: KinematicState, dt) -> KinematicState:
    """Second-order extrapolation of `state` by `dt` seconds.

    The rotation evolves by the rotation vector ω dt + ½ α dt², applied in
    the body frame; the rate evolves linearly and the acceleration is kept.
    `dt` may be negative, and may be a field element.
    """
    if not (scalar.is_scalar(dt) and scalar.is_finite(dt)):
        raise MalformedInputError(f"time shift must be a finite scalar, got {dt!r}")
    resolve_field(state.field, field_of(dt))

    omega = state.rate
    alpha = state.acceleration
    delta = vectors.add(vectors.scale(dt, omega), vectors.scale(0.5 * dt * dt, alpha))
    return KinematicState(
        shift_date(state.date, dt),
        state.rotation.compose(Rotation.from_rotation_vector(delta)),
        vectors.add(omega, vectors.scale(dt, alpha)),
        alpha,
    )


def estimate_rate(start: Rotation, end: Rotation, dt):
    """Constant body-frame rate bringing `start` to `end` in `dt` seconds."""
    if scalar.real(dt) == 0.0:
        raise MalformedInputError("cannot estimate a rate over a zero duration")
    delta = log_quaternion(quaternion_multiply(start.invert().quaternion, end.quaternion))
    return vectors.scale(1.0 / dt, delta)
