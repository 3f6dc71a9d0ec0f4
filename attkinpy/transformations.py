"""Rotation math for attkinpy.

Quaternion convention in this package:
- quaternions are numpy arrays shaped (4,)
- order is (x, y, z, w)
- components are floats or field elements (derivative structures,
  univariate derivatives), in which case the dtype is `object`

A `Rotation` is a frame transform: `apply_to(u)` gives the coordinates in
the rotated frame of a vector `u` expressed in the reference frame. With
this convention `compose(r1, r2)` (apply r1, then r2) is the Hamilton
product `q1 * q2`, and the rotation vector `v` maps to the quaternion
`(sin(|v|/2) v/|v|, cos(|v|/2))`, the same as scipy's `from_rotvec`.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation as ScipyRotation

from attkinpy import scalar, vectors
from attkinpy.errors import MalformedInputError
from attkinpy.fields import REAL_FIELD, field_of, resolve_field

# below this squared angle the exponential and logarithmic maps switch to series
SMALL_ANGLE_SQ = 1.0e-6
# tolerance on |q| for quaternions given without normalization
UNIT_NORM_TOLERANCE = 1.0e-9


def _quaternion(components: Sequence) -> np.ndarray:
    components = list(components)
    if any(field_of(c) != REAL_FIELD for c in components):
        out = np.empty(4, dtype=object)
        out[:] = components
    else:
        out = np.array([float(c) for c in components])
    out.flags.writeable = False
    return out


def quaternion_normalize(q: Sequence) -> np.ndarray:
    n2 = q[0] * q[0] + q[1] * q[1] + q[2] * q[2] + q[3] * q[3]
    if scalar.real(n2) == 0.0:
        raise MalformedInputError("cannot normalize a zero quaternion")
    inv = 1.0 / scalar.sqrt(n2)
    return _quaternion([inv * c for c in q])


def quaternion_conjugate(q: Sequence) -> np.ndarray:
    return _quaternion([-q[0], -q[1], -q[2], q[3]])


def quaternion_negate(q: Sequence) -> np.ndarray:
    return _quaternion([-c for c in q])


def quaternion_multiply(q1: Sequence, q2: Sequence) -> np.ndarray:
    """Hamilton product. Inputs/outputs are (x,y,z,w)."""
    x1, y1, z1, w1 = q1
    x2, y2, z2, w2 = q2

    x = w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2
    y = w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2
    z = w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2
    w = w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2
    return _quaternion([x, y, z, w])


def quaternion_dot(q1: Sequence, q2: Sequence):
    return q1[0] * q2[0] + q1[1] * q2[1] + q1[2] * q2[2] + q1[3] * q2[3]


def pure_quaternion(v: Sequence) -> np.ndarray:
    return _quaternion([v[0], v[1], v[2], 0.0 * v[0]])


def exp_quaternion(v: Sequence) -> np.ndarray:
    """Unit quaternion of the rotation vector `v` (exponential map)."""
    theta_sq = vectors.norm_sq(v)
    if scalar.real(theta_sq) < SMALL_ANGLE_SQ:
        # sin(t/2)/t and cos(t/2) as series in t^2
        t4 = theta_sq * theta_sq
        half_sinc = 0.5 - theta_sq / 48.0 + t4 / 3840.0
        w = 1.0 - theta_sq / 8.0 + t4 / 384.0
    else:
        theta = scalar.sqrt(theta_sq)
        half_sinc = scalar.sin(0.5 * theta) / theta
        w = scalar.cos(0.5 * theta)
    return _quaternion([half_sinc * v[0], half_sinc * v[1], half_sinc * v[2], w])


def log_quaternion(q: Sequence, principal: bool = True) -> np.ndarray:
    """Rotation vector of the unit quaternion `q` (logarithmic map).

    With `principal` the quaternion is first brought to w >= 0 so the
    magnitude is at most pi. Otherwise the sign of `q` is kept and the
    magnitude lies in [0, 2 pi), which is what keeps a sign-continuous
    sequence of quaternions continuous in rotation-vector space.
    """
    if principal and scalar.real(q[3]) < 0:
        q = quaternion_negate(q)

    x, y, z, w = q
    s_sq = x * x + y * y + z * z
    if scalar.real(s_sq) < SMALL_ANGLE_SQ and scalar.real(w) > 0:
        # 2 atan(s / w) / s as a series in s^2
        u = s_sq / (w * w)
        factor = (2.0 / w) * (1.0 - u / 3.0 + u * u / 5.0)
    else:
        s = scalar.sqrt(s_sq)
        factor = 2.0 * scalar.arctan2(s, w) / s
    return vectors.vector([factor * x, factor * y, factor * z])


class Rotation():
    def __init__(self, q: Sequence, normalize: bool = False) -> None:
        """
        Args:
            q: quaternion components (x, y, z, w)
            normalize: rescale q to unit norm instead of checking it
        """
        if len(q) != 4:
            raise MalformedInputError(f"a quaternion needs 4 components, got {len(q)}")
        if not all(scalar.is_scalar(c) for c in q):
            raise MalformedInputError(f"quaternion components must be scalars, got {q!r}")
        if not all(scalar.is_finite(c) for c in q):
            raise MalformedInputError(f"non-finite quaternion {q!r}")

        if normalize:
            self._q = quaternion_normalize(q)
        else:
            norm_sq = scalar.real(quaternion_dot(q, q))
            if abs(norm_sq - 1.0) > UNIT_NORM_TOLERANCE:
                raise MalformedInputError(f"quaternion norm {np.sqrt(norm_sq)} is not 1, use normalize=True")
            self._q = _quaternion(q)

    @classmethod
    def identity(cls, field=REAL_FIELD) -> "Rotation":
        return cls([field.zero, field.zero, field.zero, field.one])

    @classmethod
    def from_rotation_vector(cls, v: Sequence) -> "Rotation":
        return cls._trusted(exp_quaternion(v))

    @classmethod
    def from_axis_angle(cls, axis: Sequence, angle) -> "Rotation":
        """Frame rotated by `angle` around `axis` (the axis need not be normalized)."""
        n = vectors.norm(axis)
        if scalar.real(n) == 0.0:
            raise MalformedInputError("rotation axis has zero norm")
        return cls.from_rotation_vector(vectors.scale(angle / n, axis))

    @classmethod
    def from_scipy(cls, rotation: ScipyRotation) -> "Rotation":
        return cls(rotation.as_quat(), normalize=True)

    @classmethod
    def _trusted(cls, q: np.ndarray) -> "Rotation":
        # quaternion already unit norm by construction
        rotation = cls.__new__(cls)
        rotation._q = q if not q.flags.writeable else _quaternion(q)
        return rotation

    @property
    def quaternion(self) -> np.ndarray:
        return self._q

    @property
    def x(self):
        return self._q[0]

    @property
    def y(self):
        return self._q[1]

    @property
    def z(self):
        return self._q[2]

    @property
    def w(self):
        return self._q[3]

    @property
    def field(self):
        return resolve_field(*(field_of(c) for c in self._q))

    def compose(self, other: "Rotation") -> "Rotation":
        """Apply `self`, then `other`."""
        return Rotation._trusted(quaternion_multiply(self._q, other._q))

    def invert(self) -> "Rotation":
        return Rotation._trusted(quaternion_conjugate(self._q))

    def apply_to(self, u: Sequence) -> np.ndarray:
        """Coordinates of `u` in the rotated frame."""
        x, y, z, w = self._q
        # u' = u + w t + t x v, with v = (x, y, z) and t = 2 u x v
        t = vectors.scale(2.0, vectors.cross(u, [x, y, z]))
        return vectors.add(u, vectors.scale(w, t), vectors.cross(t, [x, y, z]))

    def apply_inverse_to(self, u: Sequence) -> np.ndarray:
        return self.invert().apply_to(u)

    @property
    def angle(self):
        """Rotation angle in [0, pi]."""
        x, y, z, w = self._q
        s = vectors.norm([x, y, z])
        return 2.0 * scalar.arctan2(s, abs(w))

    @property
    def axis(self) -> np.ndarray:
        """Unit rotation axis; +X for the identity."""
        x, y, z, w = self._q
        if scalar.real(w) < 0:
            x, y, z = -x, -y, -z
        s = vectors.norm([x, y, z])
        if scalar.real(s) == 0.0:
            return vectors.vector([1.0 + 0.0 * w, 0.0 * w, 0.0 * w])
        return vectors.scale(1.0 / s, [x, y, z])

    def to_rotation_vector(self) -> np.ndarray:
        return log_quaternion(self._q, principal=True)

    def to_plain(self) -> "Rotation":
        return Rotation._trusted(_quaternion([scalar.real(c) for c in self._q]))

    def to_scipy(self) -> ScipyRotation:
        """scipy rotation with the same quaternion; its `apply` is our `apply_inverse_to`."""
        return ScipyRotation.from_quat([scalar.real(c) for c in self._q])

    def __repr__(self) -> str:
        return f"Rotation(x={self.x!r}, y={self.y!r}, z={self.z!r}, w={self.w!r})"


def compose(r1: Rotation, r2: Rotation) -> Rotation:
    return r1.compose(r2)


def invert(r: Rotation) -> Rotation:
    return r.invert()


def distance(r1: Rotation, r2: Rotation):
    """Angle of the rotation bringing `r1` to `r2`, in [0, pi]."""
    return r1.invert().compose(r2).angle


def to_rotation_vector(r: Rotation) -> np.ndarray:
    return r.to_rotation_vector()


def from_rotation_vector(v: Sequence) -> Rotation:
    return Rotation.from_rotation_vector(v)
