"""py-recurrence - dates of iCalendar-style recurrence rules."""

from .calendar import RecurrenceCalendar
from .config import GuardConfig
from .errors import (
    ExhaustionError,
    FilterRangeError,
    ProgressGuardError,
    RecurrenceError,
    RuleSyntaxError,
)
from .guard import ProgressGuard
from .rule import Frequency, RecurrenceRule, format_rule, parse_rule

__version__ = "0.1.0"

__all__ = [
    "ExhaustionError",
    "FilterRangeError",
    "Frequency",
    "GuardConfig",
    "ProgressGuard",
    "ProgressGuardError",
    "RecurrenceCalendar",
    "RecurrenceError",
    "RecurrenceRule",
    "RuleSyntaxError",
    "format_rule",
    "parse_rule",
]
