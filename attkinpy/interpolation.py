"""Hermite interpolation of kinematic states.

Rotations cannot be interpolated component-wise, so every sample is first
expressed as a small residual rotation with respect to a chart: a constant
spin attached to a reference sample and tilted by a constant rotation.
Residuals are mapped to rotation vectors, interpolated with their time
derivatives, and mapped back on top of the chart at the target date. The
chart never accelerates, so sample accelerations reach the result only
through the second derivatives of the residuals.

The rotation vector of a residual is singular at 2 pi. When one residual
gets too close to it the tilt is increased and the chart rebuilt; with n
samples, one of n + 2 evenly spaced tilts about X always works.
"""

from abc import abstractmethod
from enum import Enum
import logging
from typing import Any, List, Literal, Optional, Sequence, Tuple

import numpy as np
from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, Field, field_validator, model_validator

from attkinpy import scalar, vectors
from attkinpy.bridge import DerivativeEncoding, from_derivative_encoding, to_derivative_encoding
from attkinpy.dates import duration_between
from attkinpy.errors import KinematicsError, MalformedInputError, NotEnoughDataError
from attkinpy.extrapolation import estimate_rate
from attkinpy.fields import resolve_field
from attkinpy.hermite import HermiteInterpolator
from attkinpy.logging_utils import LoggingConfig, instance_logger_name, log_exception, setup_logging
from attkinpy.offset import add_offset, revert
from attkinpy.state import KinematicState
from attkinpy.transformations import (
    Rotation,
    exp_quaternion,
    log_quaternion,
    quaternion_dot,
    quaternion_negate,
)
from attkinpy.univariate import UnivariateDerivative

# residual quaternions must keep w above -(1 - SINGULARITY_MARGIN)
SINGULARITY_MARGIN = 1.0e-4
TILT_AXIS = (1.0, 0.0, 0.0)

_logger = logging.getLogger(__name__)


class AngularDerivativesFilter(Enum):
    USE_R = "use_r"
    USE_RR = "use_rr"
    USE_RRA = "use_rra"

    @property
    def max_order(self) -> int:
        """Highest rotation derivative taken from the samples."""
        return {"use_r": 0, "use_rr": 1, "use_rra": 2}[self.value]

    @property
    def min_samples(self) -> int:
        return 2

    @classmethod
    def from_order(cls, order: int) -> "AngularDerivativesFilter":
        if order < 0:
            raise MalformedInputError(f"derivation order must be non-negative, got {order}")
        if order == 0:
            return cls.USE_R
        elif order == 1:
            return cls.USE_RR
        else:
            return cls.USE_RRA


class InterpolationConfig(BaseModel):
    filter: AngularDerivativesFilter = Field(
        AngularDerivativesFilter.USE_RR, description="Which sample derivatives are interpolated"
    )
    reference: Literal["closest", "first", "last"] = Field(
        "closest", description="Sample the interpolation chart is attached to"
    )
    max_attempts: Optional[int] = Field(
        None, ge=1, description="Number of charts tried before giving up, sample size + 2 when unset"
    )

    @model_validator(mode="before")
    @classmethod
    def from_omegaconf(cls, data: Any) -> Any:
        if isinstance(data, DictConfig):
            data = OmegaConf.to_container(data, resolve=True)
        return data

    @field_validator("filter", mode="before")
    @classmethod
    def parse_filter(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower()
        if isinstance(value, int) and not isinstance(value, bool):
            return AngularDerivativesFilter.from_order(value)
        return value


class InterpolationStrategy():
    filter: AngularDerivativesFilter

    @abstractmethod
    def chart_derivatives(
        self,
        samples: List[KinematicState],
        offsets: List[float],
        reference: int
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Rate and acceleration of the chart attached to `samples[reference]`.

        `shifted_by` is only exact for a constant spin, so every strategy
        returns a zero acceleration.
        """
        pass

    def hermite_data(self, rotation_vector: Sequence) -> List[np.ndarray]:
        """Value and derivatives of a residual rotation vector fed to the interpolator."""
        return [
            vectors.vector([c.derivative(k) for c in rotation_vector])
            for k in range(self.filter.max_order + 1)
        ]


class RotationOnlyStrategy(InterpolationStrategy):
    filter = AngularDerivativesFilter.USE_R

    def chart_derivatives(self, samples, offsets, reference):
        rates = [
            estimate_rate(start.rotation, end.rotation, t_end - t_start)
            for start, end, t_start, t_end in zip(samples[:-1], samples[1:], offsets[:-1], offsets[1:])
        ]
        mean_rate = vectors.scale(1.0 / len(rates), vectors.add(*rates))
        return mean_rate, vectors.zero_vector()


class RotationRateStrategy(InterpolationStrategy):
    filter = AngularDerivativesFilter.USE_RR

    def chart_derivatives(self, samples, offsets, reference):
        return samples[reference].rate, vectors.zero_vector()


class RotationRateAccelerationStrategy(InterpolationStrategy):
    filter = AngularDerivativesFilter.USE_RRA

    def chart_derivatives(self, samples, offsets, reference):
        # accelerations enter through the residuals
        return samples[reference].rate, vectors.zero_vector()


class InterpolationStrategyFactory:
    @staticmethod
    def get_strategy(filter: AngularDerivativesFilter) -> InterpolationStrategy:
        if filter == AngularDerivativesFilter.USE_R:
            return RotationOnlyStrategy()
        elif filter == AngularDerivativesFilter.USE_RR:
            return RotationRateStrategy()
        elif filter == AngularDerivativesFilter.USE_RRA:
            return RotationRateAccelerationStrategy()
        else:
            raise MalformedInputError(f"Unsupported filter: {filter}")


def _as_states(samples) -> List[KinematicState]:
    states = []
    for sample in samples:
        if isinstance(sample, KinematicState):
            states.append(sample)
        elif isinstance(sample, tuple) and len(sample) == 2 and isinstance(sample[1], KinematicState):
            # the pair's date wins over the state's own stamp
            states.append(sample[1].with_date(sample[0]))
        else:
            raise MalformedInputError(f"samples must be states or (date, state) pairs, got {sample!r}")
    return states


class Interpolator():
    def __init__(
        self,
        config: Optional[InterpolationConfig] = None,
        logging_config: Optional[LoggingConfig] = None,
        logger: Optional[logging.Logger] = None
    ) -> None:
        self.config = config if config is not None else InterpolationConfig()
        if logger is None:
            logging_config = logging_config if logging_config is not None else LoggingConfig()
            logger = setup_logging(instance_logger_name(self), logging_config.level, logging_config.formatter)
        self.logger = logger

    def interpolate(self, date, samples, filter: Optional[AngularDerivativesFilter] = None) -> KinematicState:
        """Interpolate the state at `date` from `samples`.

        Args:
            date: target date, of the same kind as the sample dates
            samples: states, or (date, state) pairs
            filter: overrides the configured filter
        """
        if filter is None:
            filter = self.config.filter
        elif not isinstance(filter, AngularDerivativesFilter):
            filter = InterpolationConfig(filter=filter).filter

        try:
            return self._interpolate(date, filter, _as_states(samples))
        except KinematicsError:
            log_exception(self.logger, f"Unable to interpolate at {date!r}")
            raise

    def _reference_index(self, offsets: List[float]) -> int:
        if self.config.reference == "first":
            return 0
        elif self.config.reference == "last":
            return len(offsets) - 1
        return min(range(len(offsets)), key=lambda i: abs(offsets[i]))

    def _interpolate(self, date, filter: AngularDerivativesFilter, states: List[KinematicState]) -> KinematicState:
        if len(states) < filter.min_samples:
            raise NotEnoughDataError(filter.min_samples, len(states))
        resolve_field(*(s.field for s in states))

        offsets = [duration_between(s.date, date) for s in states]
        if len(set(offsets)) != len(offsets):
            raise MalformedInputError("interpolation samples must have distinct dates")
        order = sorted(range(len(states)), key=lambda i: offsets[i])
        states = [states[i] for i in order]
        offsets = [offsets[i] for i in order]

        reference = self._reference_index(offsets)
        strategy = InterpolationStrategyFactory.get_strategy(filter)
        rate, acceleration = strategy.chart_derivatives(states, offsets, reference)
        chart = KinematicState(states[reference].date, states[reference].rotation, rate, acceleration)
        self.logger.debug(
            f"Interpolating {len(states)} samples with {filter.name}, chart attached to sample {reference}"
        )

        n = len(states)
        epsilon = 2.0 * np.pi / n
        threshold = min(-(1.0 - SINGULARITY_MARGIN), -np.cos(epsilon / 4))
        max_attempts = self.config.max_attempts if self.config.max_attempts is not None else n + 2

        for attempt in range(max_attempts):
            tilt = KinematicState(chart.date, Rotation.from_axis_angle(TILT_AXIS, attempt * epsilon))
            residuals = self._residual_vectors(chart, tilt, states, offsets, reference, filter.max_order, threshold)
            if residuals is None:
                self.logger.debug(f"Residual too close to the 2 pi singularity, restarting with tilt {attempt + 1}")
                continue

            # closest sample first: at its own date every later Newton term vanishes
            hermite = HermiteInterpolator()
            for i in sorted(range(n), key=lambda i: abs(offsets[i])):
                hermite.add_sample_point(offsets[i], *strategy.hermite_data(residuals[i]))
            value, first, second = hermite.derivatives(0.0, 2)

            rotation_vector = [UnivariateDerivative([value[k], first[k], second[k]]) for k in range(3)]
            residual = from_derivative_encoding(DerivativeEncoding(date, exp_quaternion(rotation_vector), 2))
            local_chart = add_offset(chart.shifted_by(-offsets[reference]), tilt)
            return add_offset(local_chart, residual).with_date(date)

        raise KinematicsError(f"No interpolation chart avoids the 2 pi singularity after {max_attempts} attempts")

    def _residual_vectors(self, chart, tilt, states, offsets, reference, order, threshold):
        """Rotation vectors of the residuals with respect to the tilted chart, None if one is singular."""
        quaternions = []
        for state, offset in zip(states, offsets):
            local_chart = add_offset(chart.shifted_by(offset - offsets[reference]), tilt)
            residual = add_offset(revert(local_chart), state)
            quaternions.append(to_derivative_encoding(residual, order).quaternion)

        # continuous signs, walking away from the reference sample
        if scalar.real(quaternions[reference][3]) < 0:
            quaternions[reference] = quaternion_negate(quaternions[reference])
        for i in range(reference + 1, len(quaternions)):
            if scalar.real(quaternion_dot(quaternions[i], quaternions[i - 1])) < 0:
                quaternions[i] = quaternion_negate(quaternions[i])
        for i in range(reference - 1, -1, -1):
            if scalar.real(quaternion_dot(quaternions[i], quaternions[i + 1])) < 0:
                quaternions[i] = quaternion_negate(quaternions[i])

        if any(scalar.real(q[3]) < threshold for q in quaternions):
            return None
        return [log_quaternion(q, principal=False) for q in quaternions]


def interpolate(
    date,
    filter: AngularDerivativesFilter,
    samples: Sequence,
    reference: Literal["closest", "first", "last"] = "closest",
    max_attempts: Optional[int] = None
) -> KinematicState:
    """Interpolate the state at `date` from `samples` using `filter`."""
    config = InterpolationConfig(filter=filter, reference=reference, max_attempts=max_attempts)
    return Interpolator(config, logger=_logger).interpolate(date, samples)
