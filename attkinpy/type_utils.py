import collections.abc
import numbers
from datetime import datetime
from typing import Any, Tuple, Union, get_args, get_origin

import numpy as np

from attkinpy.errors import MalformedInputError

Date = Union[numbers.Real, datetime, np.datetime64]


def check_type(value: Any, expected_type: Any, allow_none: bool = False) -> bool:
    """
    Checks if a value matches the expected type, supporting Union, Tuple[...]
    and Sequence[...] on top of plain classes.
    """
    if value is None:
        return allow_none

    origin = get_origin(expected_type)
    args = get_args(expected_type)

    if origin is None:
        return isinstance(value, expected_type)

    if origin is Union:
        return any(check_type(value, arg) for arg in args)

    if origin is tuple or origin is Tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return isinstance(value, tuple) and all(check_type(item, args[0]) for item in value)
        return (
            isinstance(value, tuple) and
            len(value) == len(args) and
            all(check_type(item, arg) for item, arg in zip(value, args))
        )

    if origin in (collections.abc.Sequence, list):
        return (
            isinstance(value, collections.abc.Sequence) and
            (not args or all(check_type(item, args[0]) for item in value))
        )

    return False


def require_type(value: Any, expected_type: Any, name: str, allow_none: bool = False) -> None:
    if not check_type(value, expected_type, allow_none=allow_none):
        raise MalformedInputError(f"{name} must be {expected_type}, got {type(value).__name__}")
