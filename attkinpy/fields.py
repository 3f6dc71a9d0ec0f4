"""Scalar fields.

A field describes which kind of scalar flows through the algorithms:
plain floats (`REAL_FIELD`), derivative structures tracking partial
derivatives with respect to a fixed number of free parameters, or
univariate time derivatives whose coefficients belong to another field.
Fields are frozen pydantic models, so two fields built with the same
settings compare equal and can be shared freely between threads.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from attkinpy.errors import MalformedInputError, MismatchedFieldError


class FieldElement():
    """Scalar carrying derivatives, usable wherever a float is."""

    @property
    @abstractmethod
    def real(self) -> float:
        pass

    @abstractmethod
    def is_finite(self) -> bool:
        pass

    @abstractmethod
    def sqrt(self) -> "FieldElement":
        pass

    @abstractmethod
    def sin(self) -> "FieldElement":
        pass

    @abstractmethod
    def cos(self) -> "FieldElement":
        pass

    @abstractmethod
    def arctan(self) -> "FieldElement":
        pass

    @abstractmethod
    def arctan2(self, x) -> "FieldElement":
        pass


class RealField(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def zero(self) -> float:
        return 0.0

    @property
    def one(self) -> float:
        return 1.0

    def constant(self, value: float) -> float:
        return float(value)

    def __str__(self) -> str:
        return "RealField"


class DerivativeField(BaseModel):
    model_config = ConfigDict(frozen=True)

    parameters: int = Field(1, ge=1, description="Number of free parameters")
    order: int = Field(1, ge=0, le=2, description="Highest derivation order tracked")

    @property
    def zero(self):
        return self.constant(0.0)

    @property
    def one(self):
        return self.constant(1.0)

    def constant(self, value: float):
        from attkinpy.derivatives import DerivativeStructure

        return DerivativeStructure(self, float(value))

    def variable(self, index: int, value: float):
        """Create the free parameter `index`, whose first derivative with respect to itself is 1."""
        from attkinpy.derivatives import DerivativeStructure

        if not 0 <= index < self.parameters:
            raise MalformedInputError(f"parameter index {index} out of range [0, {self.parameters})")

        gradient = None
        if self.order >= 1:
            gradient = np.zeros(self.parameters)
            gradient[index] = 1.0
        return DerivativeStructure(self, float(value), gradient)

    def __str__(self) -> str:
        return f"DerivativeField(parameters={self.parameters}, order={self.order})"


class UnivariateField(BaseModel):
    """Time derivatives up to `order`, coefficients in `base`."""
    model_config = ConfigDict(frozen=True)

    order: int = Field(1, ge=0, le=2)
    base: Union[DerivativeField, RealField] = Field(default_factory=RealField)

    @property
    def zero(self):
        return self.constant(0.0)

    @property
    def one(self):
        return self.constant(1.0)

    def constant(self, value):
        from attkinpy.univariate import UnivariateDerivative

        return UnivariateDerivative.constant(value, self.order)

    def __str__(self) -> str:
        return f"UnivariateField(order={self.order}, base={self.base})"


REAL_FIELD = RealField()


def field_of(value: Any):
    if isinstance(value, FieldElement):
        return value.field
    return REAL_FIELD


def resolve_field(*fields: Any):
    """Return the one non-real field among `fields`, or `REAL_FIELD`.

    Plain floats are constants of every field, so `REAL_FIELD` never
    conflicts with anything.
    """
    resolved = REAL_FIELD
    for field in fields:
        if field == REAL_FIELD:
            continue
        if resolved != REAL_FIELD and resolved != field:
            raise MismatchedFieldError(resolved, field)
        resolved = field
    return resolved
