"""Exceptions raised while parsing rules and generating recurrences."""

from __future__ import annotations


class RecurrenceError(Exception):
    """Base class for every error raised by py_recurrence."""


class RuleSyntaxError(RecurrenceError, ValueError):
    """The rule text does not follow the supported RRULE grammar.

    Attributes:
        token: The offending token or value, when one can be singled out
    """

    def __init__(self, message: str, token: str | None = None):
        self.token = token
        super().__init__(message)


class FilterRangeError(RuleSyntaxError):
    """A BYMONTH, BYMONTHDAY, BYDAY or BYSETPOS value is out of range or unknown."""


class ExhaustionError(RecurrenceError, LookupError):
    """A date was requested from a recurrence that has no more dates."""


class ProgressGuardError(RecurrenceError, RuntimeError):
    """Generation made too many rejection steps within one time window.

    Attributes:
        steps: Number of steps counted in the window when the guard tripped
    """

    def __init__(self, message: str, steps: int = 0):
        self.steps = steps
        super().__init__(message)
