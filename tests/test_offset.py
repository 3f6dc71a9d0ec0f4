"""Tests for the offset algebra (add_offset, subtract_offset, revert)."""

import numpy as np
import pytest

from attkinpy import transformations
from attkinpy.bridge import lift_to_field
from attkinpy.errors import MismatchedFieldError
from attkinpy.fields import DerivativeField
from attkinpy.offset import add_offset, revert, subtract_offset
from attkinpy.state import KinematicState
from attkinpy.transformations import Rotation


def _norm(v):
    return float(np.sqrt(sum(float(getattr(c, "real", c)) ** 2 for c in v)))


@pytest.fixture
def random_state(random_rotation, random_vector):
    def make(norm: float) -> KinematicState:
        return KinematicState(0.0, random_rotation(), random_vector(norm), random_vector(norm))
    return make


class TestOffsetAlgebra:

    def test_reverse_offset(self, random_state):
        for _ in range(100):
            state = random_state(1e-3)
            total = add_offset(state, revert(state))
            assert total.rotation.angle < 1e-15
            assert _norm(total.rate) < 1e-15
            assert _norm(total.acceleration) < 1e-15

    def test_reverse_offset_methods(self, random_state):
        state = random_state(1.0)
        total = state.revert().add_offset(state)
        assert total.rotation.angle < 1e-15
        assert _norm(total.rate) < 1e-15
        assert _norm(total.acceleration) < 1e-15

    def test_no_commute(self, variable_rotation, variable_vector):
        s1 = KinematicState(0.0, variable_rotation(0.64, 0.36, 0.48, 0.48), variable_vector(0, 0, 0))
        s2 = KinematicState(0.0, variable_rotation(-0.48, 0.48, 0.64, 0.36), variable_vector(0, 0, 0))
        d = transformations.distance(add_offset(s1, s2).rotation, add_offset(s2, s1).rotation)
        assert d.real == pytest.approx(2.574, abs=1e-3)

    def test_round_trip(self, random_state):
        for _ in range(100):
            s1 = random_state(1e-2)
            s2 = random_state(1e-2)

            sub_add = add_offset(subtract_offset(s1, s2), s2)
            assert transformations.distance(s1.rotation, sub_add.rotation) < 1e-15
            assert _norm(s1.rate - sub_add.rate) < 1e-16
            assert _norm(s1.acceleration - sub_add.acceleration) < 1e-16

            add_sub = s1.add_offset(s2).subtract_offset(s2)
            assert transformations.distance(s1.rotation, add_sub.rotation) < 1e-15
            assert _norm(s1.rate - add_sub.rate) < 1e-16
            assert _norm(s1.acceleration - add_sub.acceleration) < 1e-16

    def test_associative(self, random_state):
        a, b, c = random_state(0.5), random_state(0.5), random_state(0.5)
        left = add_offset(add_offset(a, b), c)
        right = add_offset(a, add_offset(b, c))
        assert transformations.distance(left.rotation, right.rotation) < 1e-14
        assert np.allclose(left.rate, right.rate, atol=1e-14)
        assert np.allclose(left.acceleration, right.acceleration, atol=1e-14)

    def test_identity_is_neutral(self, random_state):
        state = random_state(0.5)
        identity = KinematicState.identity()
        for total in (add_offset(state, identity), add_offset(identity, state)):
            assert transformations.distance(state.rotation, total.rotation) < 1e-15
            assert np.allclose(total.rate, state.rate, atol=1e-15)
            assert np.allclose(total.acceleration, state.acceleration, atol=1e-15)

    def test_composed_motion(self, random_state):
        """Composing two evolving states matches the evolution of the composed state."""
        a, b = random_state(0.5), random_state(0.5)
        total = add_offset(a, b)
        dt = 1e-4

        forward = add_offset(a.shifted_by(dt), b.shifted_by(dt))
        backward = add_offset(a.shifted_by(-dt), b.shifted_by(-dt))
        assert transformations.distance(forward.rotation, total.shifted_by(dt).rotation) < 1e-11
        assert np.allclose((forward.rate - backward.rate) / (2 * dt), total.acceleration, atol=1e-7)
        assert np.allclose(0.5 * (forward.rate + backward.rate), total.rate, atol=1e-7)

    def test_frame_rate_transport(self):
        """Rate of a frame spinning about Z, seen from a frame spinning about X."""
        inner = KinematicState(0.0, Rotation.identity(), [0.0, 0.0, 1.0])
        outer = KinematicState(0.0, Rotation.from_axis_angle([0.0, 1.0, 0.0], 0.5 * np.pi), [2.0, 0.0, 0.0])
        total = add_offset(inner, outer)
        # seen from a frame turned by +90 degrees about Y, the old Z axis lies along -X
        assert np.allclose(total.rate, [1.0, 0.0, 0.0])
        assert np.allclose(total.acceleration, 0.0)

    def test_date_of_first_operand(self, random_rotation):
        a = KinematicState(1.0, random_rotation())
        b = KinematicState(2.0, random_rotation())
        assert add_offset(a, b).date == 1.0
        assert subtract_offset(b, a).date == 2.0

    def test_mismatched_fields(self, random_state):
        a = lift_to_field(DerivativeField(parameters=1, order=1), random_state(0.1))
        b = lift_to_field(DerivativeField(parameters=2, order=1), random_state(0.1))
        with pytest.raises(MismatchedFieldError):
            add_offset(a, b)

    def test_plain_and_field_operands(self, random_state):
        field = DerivativeField(parameters=1, order=1)
        a = lift_to_field(field, random_state(0.1))
        b = random_state(0.1)
        assert add_offset(a, b).field == field
        assert add_offset(b, a).field == field
