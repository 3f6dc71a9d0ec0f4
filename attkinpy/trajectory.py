from typing import Iterator, List, Optional, Sequence, Union

from attkinpy.dates import duration_between
from attkinpy.errors import MalformedInputError, NotEnoughDataError
from attkinpy.interpolation import AngularDerivativesFilter, InterpolationConfig, Interpolator
from attkinpy.logging_utils import LoggingConfig, instance_logger_name, setup_logging
from attkinpy.state import KinematicState
from attkinpy.type_utils import require_type


class KinematicTrajectory():
    """Chronologically sorted, in-memory sequence of kinematic states."""

    def __init__(
        self,
        states: Sequence[KinematicState] = (),
        config: Optional[InterpolationConfig] = None,
        interpolation_points: int = 4,
        logging_config: Optional[LoggingConfig] = None
    ):
        states = list(states)
        for state in states:
            require_type(state, KinematicState, "trajectory state")
        if interpolation_points < 2:
            raise MalformedInputError(f"interpolation needs at least 2 points, got {interpolation_points}")

        if states:
            origin = states[0].date
            offsets = [duration_between(s.date, origin) for s in states]
            if len(set(offsets)) != len(offsets):
                raise MalformedInputError("trajectory states must have distinct dates")
            states = [s for _, s in sorted(zip(offsets, states), key=lambda pair: pair[0])]

        self.states: List[KinematicState] = states
        self.config = config if config is not None else InterpolationConfig()
        self.interpolation_points = interpolation_points
        self.logging_config = logging_config if logging_config is not None else LoggingConfig()
        self.logger = setup_logging(
            instance_logger_name(self), self.logging_config.level, self.logging_config.formatter
        )
        self.interpolator = Interpolator(self.config, logger=self.logger)

    def __len__(self) -> int:
        return len(self.states)

    def __iter__(self) -> Iterator[KinematicState]:
        return iter(self.states)

    def __getitem__(self, key: Union[int, slice]):
        if isinstance(key, slice):
            return KinematicTrajectory(
                self.states[key], self.config, self.interpolation_points, self.logging_config
            )
        return self.states[key]

    def _require_states(self) -> None:
        if not self.states:
            raise NotEnoughDataError(1, 0)

    @property
    def first(self) -> KinematicState:
        self._require_states()
        return self.states[0]

    @property
    def last(self) -> KinematicState:
        self._require_states()
        return self.states[-1]

    @property
    def dates(self) -> list:
        return [s.date for s in self.states]

    def neighbors(self, date, count: Optional[int] = None) -> List[KinematicState]:
        """The `count` states closest to `date`, in chronological order."""
        if count is None:
            count = self.interpolation_points
        if count < 1:
            raise MalformedInputError(f"neighbor count must be positive, got {count}")

        distances = [abs(duration_between(s.date, date)) for s in self.states]
        closest = sorted(range(len(self.states)), key=lambda i: distances[i])[:count]
        return [self.states[i] for i in sorted(closest)]

    def sub_trajectory(self, start, end) -> "KinematicTrajectory":
        """States dated within [start, end]."""
        states = [
            s for s in self.states
            if duration_between(s.date, start) >= 0.0 and duration_between(end, s.date) >= 0.0
        ]
        return KinematicTrajectory(states, self.config, self.interpolation_points, self.logging_config)

    def at(self, date, filter: Optional[AngularDerivativesFilter] = None) -> KinematicState:
        neighbors = self.neighbors(date)
        self.logger.debug(f"Interpolating at {date!r} from {len(neighbors)} neighbors")
        return self.interpolator.interpolate(date, neighbors, filter)

    def append(self, state: KinematicState) -> None:
        """Add a state dated after every state already stored."""
        require_type(state, KinematicState, "trajectory state")
        if self.states and duration_between(state.date, self.states[-1].date) <= 0.0:
            raise MalformedInputError(f"appended state at {state.date!r} is not after the last state")
        self.states.append(state)

    def __repr__(self) -> str:
        return f"KinematicTrajectory({len(self.states)} states)"
