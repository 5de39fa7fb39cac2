# -*- coding: utf-8 -*-
"""
Errors raised while interpolating stop times.

Every error is fatal for the run: the interpolation stops at the first one and
nothing is written. Each exception keeps the offending `trip_id`, `field` and
`record` so callers can print a useful diagnostic.
"""

from typing import Any, Mapping, Optional


class StopTimesError(Exception):
    """Base class for stop_times interpolation errors."""

    def __init__(
        self,
        message: str,
        trip_id: Optional[str] = None,
        field: Optional[str] = None,
        record: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.trip_id = trip_id
        self.field = field
        self.record = record

    def __str__(self) -> str:
        context = []
        if self.trip_id is not None:
            context.append(f"trip_id={self.trip_id}")
        if self.field is not None:
            context.append(f"field={self.field}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class TimeParseError(StopTimesError, ValueError):
    """A time field that should hold HH:MM:SS could not be parsed."""

    def __init__(self, message: str, value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.value = value


class BoundaryError(StopTimesError):
    """Stop times without times are not enclosed by timing stops of the same trip."""


class InterpolationError(StopTimesError):
    """The span cannot be interpolated (zero total distance, missing distance)."""
