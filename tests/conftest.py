"""Shared fixtures: seeded random rotations and vectors, derivative fields, an exact composite motion."""

import numpy as np
import pytest

from attkinpy.fields import DerivativeField
from attkinpy.offset import add_offset
from attkinpy.state import KinematicState
from attkinpy.transformations import Rotation


@pytest.fixture
def rng():
    return np.random.default_rng(0x2A1B)


@pytest.fixture
def random_rotation(rng):
    """Factory of uniformly drawn unit quaternions."""
    def make() -> Rotation:
        q = rng.uniform(-1.0, 1.0, 4)
        return Rotation(q / np.linalg.norm(q))
    return make


@pytest.fixture
def random_vector(rng):
    """Factory of vectors with random direction and norm below `norm`."""
    def make(norm: float) -> np.ndarray:
        direction = rng.uniform(0.0, 1.0, 3)
        return rng.uniform(0.0, norm) * direction / np.linalg.norm(direction)
    return make


@pytest.fixture
def ds_field():
    """Four free parameters, first order."""
    return DerivativeField(parameters=4, order=1)


@pytest.fixture
def variable_vector(ds_field):
    """Factory of vectors whose components are the free parameters 0, 1 and 2."""
    def make(x: float, y: float, z: float) -> list:
        return [ds_field.variable(0, x), ds_field.variable(1, y), ds_field.variable(2, z)]
    return make


@pytest.fixture
def variable_rotation(ds_field):
    """Factory of rotations whose quaternion components (x, y, z, w) are the free parameters."""
    def make(x: float, y: float, z: float, w: float) -> Rotation:
        return Rotation([
            ds_field.variable(1, x),
            ds_field.variable(2, y),
            ds_field.variable(3, z),
            ds_field.variable(0, w),
        ])
    return make


@pytest.fixture
def composite_spin():
    """Exact motion of two stacked constant spins, a state at any date t.

    Each spin is exact under `shifted_by`; stacked with `add_offset` the rate
    and acceleration of the composite vary in time and stay consistent with
    its rotation.
    """
    inner = KinematicState(0.0, Rotation.from_axis_angle([1.0, 2.0, 3.0], 0.4), [0.05, 0.1, 0.15])
    outer = KinematicState(0.0, Rotation.from_axis_angle([0.0, 1.0, 0.0], -0.2), [0.0, 0.3, 0.0])

    def at(t: float) -> KinematicState:
        return add_offset(inner.shifted_by(t), outer.shifted_by(t))
    return at
