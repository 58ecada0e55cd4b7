"""Build recurrence calendars from iCalendar data.

Only the date part of DTSTART is used; times and timezones are ignored.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from icalendar import Calendar as iCalendar
from icalendar import Event as iEvent
from icalendar import vRecur

from .calendar import RecurrenceCalendar
from .config import GuardConfig
from .errors import RuleSyntaxError
from .guard import Clock
from .rule import PREFIX, RecurrenceRule, parse_rule

logger = logging.getLogger(__name__)

SUPPORTED_KEYS = ("FREQ", "INTERVAL", "COUNT", "UNTIL", "BYMONTH", "BYMONTHDAY", "BYDAY", "BYSETPOS")


def _format_value(key: str, value: Any) -> str:
    if key == "UNTIL":
        if isinstance(value, datetime):
            return value.strftime("%Y%m%dT%H%M%SZ")
        if isinstance(value, date):
            return value.strftime("%Y%m%dT000000Z")
    return str(value)


def rule_from_vrecur(vrecur: vRecur) -> RecurrenceRule:
    """Convert an icalendar ``vRecur`` to a RecurrenceRule.

    Keys outside the supported subset are dropped.

    Raises:
        RuleSyntaxError: If the recurrence has no FREQ or a value is invalid
    """
    clauses = []
    for key in SUPPORTED_KEYS:
        values = vrecur.get(key)
        if values is None:
            continue
        if not isinstance(values, (list, tuple)):
            values = [values]
        clauses.append(f"{key}=" + ",".join(_format_value(key, v) for v in values))

    dropped = sorted(k for k in vrecur if k.upper() not in SUPPORTED_KEYS)
    if dropped:
        logger.debug(f"Dropping unsupported recurrence keys: {dropped}")

    return parse_rule(PREFIX + ";".join(clauses))


def calendar_from_event(
    event: iEvent,
    *,
    config: GuardConfig | None = None,
    clock: Clock | None = None,
) -> RecurrenceCalendar:
    """Create a RecurrenceCalendar from a VEVENT's DTSTART and RRULE.

    Raises:
        RuleSyntaxError: If the event lacks DTSTART or RRULE, or the RRULE is
            not supported
    """
    dtstart = event.get("dtstart")
    if dtstart is None:
        raise RuleSyntaxError("Event has no DTSTART", str(event.get("uid", "")))
    rrule = event.get("rrule")
    if rrule is None:
        raise RuleSyntaxError("Event has no RRULE", str(event.get("uid", "")))
    if isinstance(rrule, list):
        # several RRULEs are deprecated in RFC 5545; the first one wins
        logger.debug(f"Event {event.get('uid')} has {len(rrule)} RRULEs, using the first")
        rrule = rrule[0]

    start = dtstart.dt
    if isinstance(start, datetime):
        start = start.date()
    return RecurrenceCalendar(start, rule_from_vrecur(rrule), config=config, clock=clock)


def calendars_from_ics(
    ical_data: str | bytes,
    *,
    config: GuardConfig | None = None,
    clock: Clock | None = None,
) -> list[tuple[str, RecurrenceCalendar]]:
    """Parse an iCalendar document and build a calendar per recurring VEVENT.

    Args:
        ical_data: iCalendar data as string or bytes

    Returns:
        ``(uid, calendar)`` pairs in document order; events without RRULE
        are skipped

    Raises:
        RuleSyntaxError: If a recurring event carries an unsupported RRULE
    """
    cal = iCalendar.from_ical(ical_data)
    result: list[tuple[str, RecurrenceCalendar]] = []
    for component in cal.walk():
        if component.name != "VEVENT" or "rrule" not in component:
            continue
        uid = str(component.get("uid", ""))
        result.append((uid, calendar_from_event(component, config=config, clock=clock)))
    logger.debug(f"Found {len(result)} recurring events")
    return result
