"""Tests for shifted_by and estimate_rate.

Tests cover:
- Zero rate keeps the rotation
- Constant spin about a fixed axis
- Rate recovery through estimate_rate
- Linear rate evolution under constant acceleration
- Shift with derivative-carrying durations
- Date kinds
"""

from datetime import datetime, timedelta

import numpy as np
import pytest

from attkinpy import transformations
from attkinpy.bridge import to_derivative_encoding
from attkinpy.errors import MalformedInputError
from attkinpy.extrapolation import estimate_rate, shifted_by
from attkinpy.fields import DerivativeField
from attkinpy.state import KinematicState
from attkinpy.transformations import Rotation


class TestShiftedBy:

    def test_zero_rate(self, variable_rotation, variable_vector):
        state = KinematicState(
            0.0,
            variable_rotation(0.48, 0.36, 0.48, 0.64),
            variable_vector(0.0, 0.0, 0.0),
            variable_vector(0.0, 0.0, 0.0),
        )
        shifted = state.shifted_by(10.0)
        assert transformations.distance(state.rotation, shifted.rotation).real == 0.0
        assert shifted.date == 10.0

    def test_spin_about_fixed_axis(self):
        omega = 0.2
        state = KinematicState(0.0, Rotation.identity(), [0.0, 0.0, omega])
        for dt in (-3.0, 0.5, 7.0):
            shifted = shifted_by(state, dt)
            expected_angle = abs(omega * dt) % (2 * np.pi)
            assert shifted.rotation.angle == pytest.approx(min(expected_angle, 2 * np.pi - expected_angle))
            assert np.allclose(
                shifted.rotation.apply_to([1.0, 0.0, 0.0]),
                [np.cos(omega * dt), -np.sin(omega * dt), 0.0],
                atol=1e-14,
            )
            assert np.allclose(shifted.rate, [0.0, 0.0, omega])

    def test_spin(self, random_rotation, random_vector):
        """The rate that brings a state to its shifted rotation is the state's rate."""
        for _ in range(20):
            rotation = random_rotation()
            rate = random_vector(1e-3)
            state = KinematicState(0.0, rotation, rate)
            dt = 10.0
            shifted = state.shifted_by(dt)
            assert np.allclose(estimate_rate(rotation, shifted.rotation, dt), rate, atol=1e-15)
            assert np.allclose(estimate_rate(shifted.rotation, rotation, dt), -rate, atol=1e-15)

    def test_uniform_acceleration(self, random_rotation, random_vector):
        state = KinematicState(0.0, random_rotation(), random_vector(0.1), random_vector(0.01))
        shifted = state.shifted_by(2.0)
        assert np.allclose(shifted.rate, state.rate + 2.0 * state.acceleration, atol=1e-15)
        assert np.array_equal(shifted.acceleration, state.acceleration)

    def test_forth_and_back(self, random_rotation, random_vector):
        state = KinematicState(0.0, random_rotation(), random_vector(0.5), random_vector(0.05))
        back = state.shifted_by(3.0).shifted_by(-3.0)
        assert transformations.distance(state.rotation, back.rotation) < 1e-14
        assert np.allclose(back.rate, state.rate, atol=1e-15)
        assert back.date == 0.0

    def test_shift_derivative_is_rotation_rate(self, random_rotation, random_vector):
        """d/dt of the shifted quaternion at dt = 0 is the encoded first derivative."""
        state = KinematicState(0.0, random_rotation(), random_vector(0.3), random_vector(0.03))
        dt = DerivativeField(parameters=1, order=2).variable(0, 0.0)
        shifted = state.shifted_by(dt)
        encoding = to_derivative_encoding(state, 2)
        for c, expected, expected_second in zip(
            shifted.rotation.quaternion, encoding.derivative(1), encoding.derivative(2)
        ):
            assert c.get_partial_derivative(1) == pytest.approx(expected, abs=1e-15)
            assert c.get_partial_derivative(2) == pytest.approx(expected_second, abs=1e-15)

    def test_non_finite_shift(self):
        state = KinematicState(0.0, Rotation.identity())
        with pytest.raises(MalformedInputError):
            state.shifted_by(np.nan)

    def test_datetime_dates(self):
        t0 = datetime(2012, 1, 1)
        state = KinematicState(t0, Rotation.identity(), [0.0, 0.0, 0.1])
        assert state.shifted_by(1.5).date == t0 + timedelta(seconds=1.5)

    def test_datetime64_dates(self):
        t0 = np.datetime64("2012-01-01T00:00:00.000000000")
        state = KinematicState(t0, Rotation.identity())
        assert state.shifted_by(-2.25).date == t0 - np.timedelta64(2250, "ms")


class TestEstimateRate:

    def test_zero_duration(self, random_rotation):
        r = random_rotation()
        with pytest.raises(MalformedInputError):
            estimate_rate(r, r, 0.0)

    def test_shortest_path(self):
        """A 350 degree turn is seen as a -10 degree one."""
        start = Rotation.identity()
        end = Rotation.from_axis_angle([1.0, 0.0, 0.0], np.radians(350.0))
        rate = estimate_rate(start, end, 1.0)
        assert np.allclose(rate, [np.radians(-10.0), 0.0, 0.0])
