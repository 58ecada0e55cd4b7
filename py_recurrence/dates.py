"""Calendar arithmetic used by the validators and generators.

Thin wrappers around ``dateutil.relativedelta`` so the rest of the package
reads like the calendar it works on. Every helper that can leave the
representable date range raises ``OverflowError``.
"""

from __future__ import annotations

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta, weekday
from dateutil.relativedelta import MO, TU, WE, TH, FR, SA, SU

# ISO numbering, Monday=1 .. Sunday=7
MONDAY = 1
SUNDAY = 7

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
_WEEKDAYS: dict[int, weekday] = {1: MO, 2: TU, 3: WE, 4: TH, 5: FR, 6: SA, 7: SU}


def _shift(value: date, delta: timedelta | relativedelta) -> date:
    try:
        return value + delta
    except (OverflowError, ValueError) as e:
        # relativedelta reports "year 10000 is out of range" as ValueError
        raise OverflowError(f"date out of range: {value.isoformat()} + {delta!r}") from e


def plus_days(value: date, days: int) -> date:
    return _shift(value, timedelta(days=days))


def plus_weeks(value: date, weeks: int) -> date:
    return _shift(value, timedelta(weeks=weeks))


def plus_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    return _shift(value, relativedelta(months=months))


def days_between(start: date, end: date) -> int:
    return (end - start).days


def last_day_of_month(value: date) -> int:
    """Day number of the last day in ``value``'s month (28..31)."""
    return (value + relativedelta(day=31)).day


def first_day_of_month(value: date) -> date:
    return value.replace(day=1)


def is_last_day_of_month(value: date) -> bool:
    return value.day == last_day_of_month(value)


def previous_or_same_monday(value: date) -> date:
    return _shift(value, relativedelta(weekday=MO(-1)))


def nth_weekday_of_month(value: date, ordinal: int, iso_weekday: int) -> date | None:
    """Return the ``ordinal``-th ``iso_weekday`` of ``value``'s month.

    Negative ordinals count from the end of the month (-1 is the last one).
    Returns None when the month has no such day (e.g. a fifth Tuesday).

    Example:
        >>> nth_weekday_of_month(date(2020, 1, 15), -2, 1)
        datetime.date(2020, 1, 20)
    """
    if ordinal == 0:
        raise ValueError("ordinal must not be zero")
    wd = _WEEKDAYS[iso_weekday]
    if ordinal > 0:
        candidate = value + relativedelta(day=1, weekday=wd(ordinal))
    else:
        candidate = value + relativedelta(day=31, weekday=wd(ordinal))
    if (candidate.year, candidate.month) != (value.year, value.month):
        return None
    return candidate


def weekday_from_code(code: str) -> int:
    """Map a two-letter iCalendar weekday code to its ISO number.

    Raises:
        KeyError: If the code is not one of MO, TU, WE, TH, FR, SA, SU
    """
    try:
        return WEEKDAY_CODES.index(code.upper()) + 1
    except ValueError:
        raise KeyError(code) from None
