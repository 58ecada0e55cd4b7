"""Debug logging utilities for recurrence generation."""

from __future__ import annotations

import logging

from .dates import WEEKDAY_CODES
from .rule import RecurrenceRule

logger = logging.getLogger("py_recurrence")

_UNITS = {"DAILY": "day", "WEEKLY": "week", "MONTHLY": "month"}


def describe_rule(rule: RecurrenceRule) -> str:
    """Render a one-line, human-readable summary of a rule.

    Args:
        rule: Parsed recurrence rule

    Returns:
        Summary such as ``"every 2 months on day 1,-1 (3 times)"``
    """
    unit = _UNITS[rule.freq.value]
    parts = [f"every {unit}" if rule.interval == 1 else f"every {rule.interval} {unit}s"]

    if rule.month_validator is not None:
        months = ",".join(str(m) for m in sorted(rule.month_validator.months))
        parts.append(f"in month {months}")
    if rule.day_of_month_validator is not None:
        validator = rule.day_of_month_validator
        days = [str(d) for d in sorted(validator.days or ())]
        days += [str(offset - 1) for offset in sorted(validator.offsets, reverse=True)]
        parts.append(f"on day {','.join(days)}")
    if rule.day_of_week_validator is not None:
        validator = rule.day_of_week_validator
        codes = [WEEKDAY_CODES[d - 1] for d in sorted(validator.weekdays or ())]
        codes += [str(o) for o in validator.ordinals]
        parts.append(f"on {','.join(codes)}")
    if rule.set_positions:
        parts.append(f"at position {','.join(str(p) for p in rule.set_positions)}")
    if rule.until is not None:
        parts.append(f"until {rule.until.isoformat()}")
    if rule.count:
        parts.append(f"({rule.count} times)")

    return " ".join(parts)


def setup_debug_logging() -> None:
    """Configure debug logging for recurrence generation."""
    logger.setLevel(logging.DEBUG)

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)

    # Simple format - just the logger name and message
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False
