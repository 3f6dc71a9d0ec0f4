from attkinpy.bridge import (
    DerivativeEncoding,
    from_derivative_encoding,
    lift_to_field,
    to_derivative_encoding,
    to_derivative_structure,
    to_plain,
)
from attkinpy.config import KinematicsConfig, load_config
from attkinpy.derivatives import DerivativeStructure
from attkinpy.errors import KinematicsError, MalformedInputError, MismatchedFieldError, NotEnoughDataError
from attkinpy.extrapolation import estimate_rate, shifted_by
from attkinpy.fields import REAL_FIELD, DerivativeField, RealField, UnivariateField
from attkinpy.interpolation import (
    AngularDerivativesFilter,
    InterpolationConfig,
    InterpolationStrategyFactory,
    Interpolator,
    interpolate,
)
from attkinpy.logging_utils import LoggingConfig
from attkinpy.offset import add_offset, revert, subtract_offset
from attkinpy.state import KinematicState
from attkinpy.trajectory import KinematicTrajectory
from attkinpy.transformations import Rotation
from attkinpy.univariate import UnivariateDerivative

__version__ = "0.1.0"
