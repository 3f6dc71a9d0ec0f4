from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from attkinpy import vectors
from attkinpy.errors import MalformedInputError
from attkinpy.fields import REAL_FIELD, resolve_field
from attkinpy.transformations import Rotation
from attkinpy.type_utils import Date, require_type


class KinematicState():
    """Time-stamped rotation with its angular rate and angular acceleration.

    The rotation transforms reference-frame coordinates into body-frame
    coordinates; rate and acceleration are expressed in the body frame.
    Instances are immutable: every operation returns a new state.
    """

    __slots__ = ("_date", "_rotation", "_rate", "_acceleration", "_field")

    def __init__(
        self,
        date: Date,
        rotation: Rotation,
        rate: Optional[Sequence] = None,
        acceleration: Optional[Sequence] = None
    ) -> None:
        require_type(date, Date, "date")
        require_type(rotation, Rotation, "rotation")

        rate = vectors.zero_vector() if rate is None else vectors.vector(rate)
        acceleration = vectors.zero_vector() if acceleration is None else vectors.vector(acceleration)
        if not (vectors.is_finite(rate) and vectors.is_finite(acceleration)):
            raise MalformedInputError(f"non-finite rate {rate!r} or acceleration {acceleration!r}")

        self._field = resolve_field(
            rotation.field, vectors.field_of_vector(rate), vectors.field_of_vector(acceleration)
        )
        self._date = date
        self._rotation = rotation
        self._rate = rate
        self._acceleration = acceleration

    @classmethod
    def identity(cls, date: Date = 0.0, field=REAL_FIELD) -> "KinematicState":
        return cls(date, Rotation.identity(field), vectors.zero_vector(field), vectors.zero_vector(field))

    @classmethod
    def from_quaternion(
        cls,
        date: Date,
        q: Sequence,
        rate: Optional[Sequence] = None,
        acceleration: Optional[Sequence] = None,
        normalize: bool = False
    ) -> "KinematicState":
        """Build a state from raw (x, y, z, w) components."""
        return cls(date, Rotation(q, normalize=normalize), rate, acceleration)

    @property
    def date(self):
        return self._date

    @property
    def rotation(self) -> Rotation:
        return self._rotation

    @property
    def rate(self) -> np.ndarray:
        return self._rate

    @property
    def acceleration(self) -> np.ndarray:
        return self._acceleration

    @property
    def field(self):
        return self._field

    def with_date(self, date: Date) -> "KinematicState":
        return KinematicState(date, self._rotation, self._rate, self._acceleration)

    def shifted_by(self, dt) -> "KinematicState":
        from attkinpy.extrapolation import shifted_by
        return shifted_by(self, dt)

    def add_offset(self, offset: "KinematicState") -> "KinematicState":
        from attkinpy.offset import add_offset
        return add_offset(self, offset)

    def subtract_offset(self, offset: "KinematicState") -> "KinematicState":
        from attkinpy.offset import subtract_offset
        return subtract_offset(self, offset)

    def revert(self) -> "KinematicState":
        from attkinpy.offset import revert
        return revert(self)

    def to_plain(self) -> "KinematicState":
        from attkinpy.bridge import to_plain
        return to_plain(self)

    def __repr__(self) -> str:
        return (
            f"KinematicState(date={self._date!r}, rotation={self._rotation!r}, "
            f"rate={self._rate.tolist()!r}, acceleration={self._acceleration.tolist()!r})"
        )
