import pytest

from attkinpy.errors import KinematicsError, MalformedInputError, MismatchedFieldError, NotEnoughDataError
from attkinpy.fields import REAL_FIELD, DerivativeField


class TestErrors:

    def test_hierarchy(self):
        assert issubclass(NotEnoughDataError, KinematicsError)
        assert issubclass(MalformedInputError, KinematicsError)
        assert issubclass(MalformedInputError, ValueError)
        assert issubclass(MismatchedFieldError, MalformedInputError)

    def test_not_enough_data(self):
        error = NotEnoughDataError(2, 1)
        assert error.required == 2
        assert error.actual == 1
        assert str(error) == "not enough data for interpolation: required 2, got 1"

    def test_mismatched_field(self):
        field = DerivativeField(parameters=3, order=2)
        error = MismatchedFieldError(REAL_FIELD, field)
        assert error.first == REAL_FIELD
        assert error.second == field
        assert "DerivativeField(parameters=3, order=2)" in str(error)

    def test_catch_as_value_error(self):
        with pytest.raises(ValueError):
            raise MismatchedFieldError(REAL_FIELD, DerivativeField())
