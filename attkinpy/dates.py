"""Date arithmetic.

Dates are floats (seconds on any time scale), `datetime.datetime` or
`numpy.datetime64`. Durations are always returned in seconds as floats.
"""

from datetime import datetime, timedelta

import numpy as np

from attkinpy import scalar
from attkinpy.errors import MalformedInputError


def duration_between(date, reference) -> float:
    """Seconds elapsed from `reference` to `date`."""
    try:
        delta = date - reference
    except TypeError as e:
        raise MalformedInputError(f"incompatible dates {date!r} and {reference!r}") from e

    if isinstance(delta, timedelta):
        return delta.total_seconds()
    if isinstance(delta, np.timedelta64):
        return float(delta / np.timedelta64(1, "ns")) * 1.0e-9
    return scalar.real(delta)


def shift_date(date, dt):
    seconds = scalar.real(dt)
    if isinstance(date, datetime):
        return date + timedelta(seconds=seconds)
    if isinstance(date, np.datetime64):
        return date + np.timedelta64(int(round(seconds * 1.0e9)), "ns")
    return date + seconds
