"""Recurrence rule parsing.

Supports a subset of the iCalendar recurrence rule (RFC 5545 section 3.3.10):

- FREQ: DAILY, WEEKLY or MONTHLY (required)
- COUNT, INTERVAL, UNTIL
- BYDAY, BYMONTH, BYMONTHDAY, BYSETPOS

Example:
    >>> rule = parse_rule("RRULE:FREQ=MONTHLY;BYMONTHDAY=-1;COUNT=3")
    >>> rule.freq
    <Frequency.MONTHLY: 'MONTHLY'>
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .dates import WEEKDAY_CODES
from .errors import FilterRangeError, RuleSyntaxError
from .validators import DayOfMonthValidator, DayOfWeekValidator, MonthValidator

logger = logging.getLogger(__name__)

PREFIX = "RRULE:"
UNTIL_PATTERN = "yyyyMMdd'T'Hmmss'Z'"

_RULE_RE = re.compile(
    r"^RRULE:(?:FREQ|UNTIL|COUNT|INTERVAL|BYDAY|BYMONTHDAY|BYWEEKDAY|BYWEEKNO|BYMONTH|"
    r"BYSETPOS|WKST|X-[A-Z0-9\-]+)=.+",
    re.IGNORECASE,
)
_CLAUSE_RE = re.compile(r"^([A-Za-z][\w\-]*)=([A-Za-z0-9,+\-]+)$")
_UNTIL_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})T(\d{1,2})(\d{2})(\d{2})Z$", re.IGNORECASE)
_INT_RE = re.compile(r"^[-+]?\d+$")


class Frequency(str, Enum):
    """Supported recurrence frequencies."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"

    @classmethod
    def parse(cls, value: str) -> Frequency:
        try:
            return cls(value.upper())
        except ValueError:
            supported = ", ".join(f.value for f in cls)
            raise RuleSyntaxError(
                f"The recurrence frequency {value!r} is invalid, supported: [{supported}]",
                value,
            ) from None


@dataclass(frozen=True)
class RecurrenceRule:
    """A parsed recurrence rule.

    ``count`` of 0 means unbounded. ``until`` is an inclusive bound compared
    as a plain calendar date. A validator left as None places no constraint.
    """

    freq: Frequency
    interval: int = 1
    count: int = 0
    until: date | None = None
    month_validator: MonthValidator | None = None
    day_of_month_validator: DayOfMonthValidator | None = None
    day_of_week_validator: DayOfWeekValidator | None = None
    set_positions: tuple[int, ...] | None = None

    def __post_init__(self) -> None:
        if self.interval < 1:
            raise RuleSyntaxError(f"INTERVAL must be a positive integer, got {self.interval}")
        if self.count < 0:
            raise RuleSyntaxError(f"COUNT must not be negative, got {self.count}")

    @classmethod
    def from_string(cls, text: str) -> RecurrenceRule:
        return parse_rule(text)

    def to_ical(self) -> str:
        return format_rule(self)

    def __str__(self) -> str:
        return format_rule(self)


def parse_rule(text: str) -> RecurrenceRule:
    """Parse an ``RRULE:KEY=VALUE;...`` string.

    Whitespace is ignored and keys are case-insensitive. Unknown keys are
    skipped.

    Args:
        text: Rule text, e.g. ``"RRULE:FREQ=WEEKLY;BYDAY=MO,WE"``

    Returns:
        The parsed RecurrenceRule

    Raises:
        RuleSyntaxError: If the text does not follow the grammar
        FilterRangeError: If a BYMONTH, BYMONTHDAY, BYDAY or BYSETPOS value
            is out of range
    """
    refined = "".join(text.split())
    if not _RULE_RE.match(refined):
        raise RuleSyntaxError(f"The rule is not valid: {text!r}", text)

    body = refined[len(PREFIX):].rstrip(";")
    fields: dict[str, object] = {}
    for clause in body.split(";"):
        match = _CLAUSE_RE.match(clause)
        if not match:
            raise RuleSyntaxError(f"The rule is not valid: {text!r} (bad clause {clause!r})", clause)
        key, value = match.group(1).upper(), match.group(2)

        if key == "FREQ":
            fields["freq"] = Frequency.parse(value)
        elif key == "COUNT":
            count = _parse_int(key, value)
            if count < 0:
                raise RuleSyntaxError(f"COUNT must not be negative: {value!r}", value)
            fields["count"] = count
        elif key == "INTERVAL":
            interval = _parse_int(key, value)
            if interval < 1:
                raise RuleSyntaxError(f"INTERVAL must be a positive integer: {value!r}", value)
            fields["interval"] = interval
        elif key == "UNTIL":
            fields["until"] = _parse_until(value)
        elif key == "BYDAY":
            fields["day_of_week_validator"] = DayOfWeekValidator.parse(value)
        elif key == "BYMONTH":
            fields["month_validator"] = MonthValidator.parse(value)
        elif key == "BYMONTHDAY":
            fields["day_of_month_validator"] = DayOfMonthValidator.parse(value)
        elif key == "BYSETPOS":
            fields["set_positions"] = _parse_set_positions(value)
        else:
            logger.debug(f"Ignoring unsupported rule key {key}={value}")

    if "freq" not in fields:
        raise RuleSyntaxError(f"The recurrence frequency must be specified: {text!r}", text)

    rule = RecurrenceRule(**fields)  # type: ignore[arg-type]
    logger.debug(f"Parsed rule {text!r} as {rule!r}")
    return rule


def format_rule(rule: RecurrenceRule) -> str:
    """Render a rule back to ``RRULE:`` text.

    Example:
        >>> format_rule(parse_rule("rrule: freq=daily; count=3"))
        'RRULE:FREQ=DAILY;COUNT=3'
    """
    parts = [f"FREQ={rule.freq.value}"]
    if rule.interval != 1:
        parts.append(f"INTERVAL={rule.interval}")
    if rule.count:
        parts.append(f"COUNT={rule.count}")
    if rule.until is not None:
        parts.append(f"UNTIL={rule.until.strftime('%Y%m%d')}T000000Z")
    if rule.month_validator is not None:
        parts.append("BYMONTH=" + ",".join(str(m) for m in sorted(rule.month_validator.months)))
    if rule.day_of_month_validator is not None:
        validator = rule.day_of_month_validator
        days = [str(d) for d in sorted(validator.days or ())]
        days += [str(offset - 1) for offset in sorted(validator.offsets, reverse=True)]
        parts.append("BYMONTHDAY=" + ",".join(days))
    if rule.day_of_week_validator is not None:
        validator = rule.day_of_week_validator
        codes = [_weekday_code(d) for d in sorted(validator.weekdays or ())]
        codes += [str(o) for o in validator.ordinals]
        parts.append("BYDAY=" + ",".join(codes))
    if rule.set_positions:
        parts.append("BYSETPOS=" + ",".join(str(p) for p in rule.set_positions))
    return PREFIX + ";".join(parts)


def _weekday_code(weekday: int) -> str:
    return WEEKDAY_CODES[weekday - 1]


def _parse_int(key: str, value: str) -> int:
    if not _INT_RE.match(value):
        raise RuleSyntaxError(f"{key} must be an integer: {value!r}", value)
    return int(value)


def _parse_until(value: str) -> date:
    match = _UNTIL_RE.match(value)
    error = RuleSyntaxError(
        f"The recurrence until date {value!r} is not valid, "
        f'it does not follow the pattern of "{UNTIL_PATTERN}"',
        value,
    )
    if not match:
        raise error
    year, month, day, hour, minute, second = (int(g) for g in match.groups())
    try:
        return datetime(year, month, day, hour, minute, second).date()
    except ValueError:
        raise error from None


def _parse_set_positions(value: str) -> tuple[int, ...]:
    positions: set[int] = set()
    for token in value.split(","):
        if not _INT_RE.match(token):
            raise RuleSyntaxError(f"Invalid BYSETPOS value: {token!r}", token)
        position = int(token)
        if position == 0:
            raise FilterRangeError(f"Invalid BYSETPOS value: {token!r}", token)
        positions.add(position)
    return tuple(sorted(positions))
