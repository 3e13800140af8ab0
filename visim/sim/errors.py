"""Exceptions raised by the simulator.

Load-time errors (malformed, unsorted or insufficient waypoint data) are
fatal: construction fails and no simulator is returned. OutOfRangeError is
raised by trajectory and synthesis queries outside the fitted time span;
the Simulator facade turns it into a False return.
"""

from typing import Optional


class VisimError(Exception):
    """Base class for simulator errors."""


class MalformedInputError(VisimError, ValueError):
    """A waypoint record has the wrong field count or a non-finite value."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class UnsortedInputError(VisimError, ValueError):
    """Waypoint times go backwards by more than the allowed tolerance."""


class InsufficientDataError(VisimError, ValueError):
    """Fewer than two usable waypoints."""


class OutOfRangeError(VisimError, ValueError):
    """Query time lies outside the trajectory span."""

    def __init__(self, t: float, start_time: float, end_time: float):
        super().__init__(
            f"time {t:.9f} outside trajectory span [{start_time:.9f}, {end_time:.9f}]"
        )
        self.t = t
        self.start_time = start_time
        self.end_time = end_time
