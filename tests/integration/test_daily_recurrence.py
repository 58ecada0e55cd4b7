"""Tests for FREQ=DAILY generation."""

from datetime import date, datetime

import pytest
from dateutil.rrule import rrulestr

from py_recurrence import RecurrenceCalendar


def generate(start: date, rule: str, n: int = 5) -> list[date]:
    return RecurrenceCalendar(start, rule).take(n)


def expected_by_dateutil(start: date, rule: str, n: int) -> list[date]:
    """Reference dates from python-dateutil for RFC-compatible rules."""
    body = rule.removeprefix("RRULE:")
    dtstart = datetime(start.year, start.month, start.day)
    return [d.date() for d in rrulestr(body, dtstart=dtstart)[:n]]


@pytest.mark.parametrize(
    "start,rule,expected",
    [
        (
            date(2018, 1, 1),
            "RRULE:FREQ=DAILY;COUNT=3",
            [date(2018, 1, 1), date(2018, 1, 2), date(2018, 1, 3)],
        ),
        (
            date(2018, 1, 1),
            "RRULE:FREQ=DAILY;INTERVAL=2;COUNT=3",
            [date(2018, 1, 1), date(2018, 1, 3), date(2018, 1, 5)],
        ),
        (
            date(2018, 1, 1),
            "RRULE:FREQ=DAILY;COUNT=3;BYDAY=SA",
            [date(2018, 1, 6), date(2018, 1, 13), date(2018, 1, 20)],
        ),
        (
            date(2018, 1, 1),
            "RRULE:FREQ=DAILY;INTERVAL=2;COUNT=3;BYDAY=MO",
            [date(2018, 1, 1), date(2018, 1, 15), date(2018, 1, 29)],
        ),
        (
            date(2018, 1, 1),
            "RRULE:FREQ=DAILY;INTERVAL=2;COUNT=3;BYDAY=MO,WE",
            [date(2018, 1, 1), date(2018, 1, 3), date(2018, 1, 15)],
        ),
        (
            date(2018, 1, 1),
            "RRULE:FREQ=DAILY;INTERVAL=3;COUNT=3;BYDAY=MO,WE",
            [date(2018, 1, 1), date(2018, 1, 10), date(2018, 1, 22)],
        ),
        (
            date(2018, 1, 30),
            "RRULE:FREQ=DAILY;COUNT=3;BYMONTH=1",
            [date(2018, 1, 30), date(2018, 1, 31), date(2019, 1, 1)],
        ),
        (
            date(2018, 1, 20),
            "RRULE:FREQ=DAILY;COUNT=3;BYMONTH=1;BYDAY=MO",
            [date(2018, 1, 22), date(2018, 1, 29), date(2019, 1, 7)],
        ),
        (
            date(2018, 1, 15),
            "RRULE:FREQ=DAILY;COUNT=3;BYMONTH=1;BYDAY=MO;INTERVAL=2",
            [date(2018, 1, 15), date(2018, 1, 29), date(2019, 1, 14)],
        ),
    ],
)
def test_daily_scenarios(start, rule, expected):
    """Test daily rules against known dates."""
    result = generate(start, rule)

    assert result == expected, f"{rule} from {start}: got {result}"


def test_daily_leap_day_with_unknown_key():
    """Test a leap-day-only rule spanning several years."""
    result = generate(date(2018, 1, 1), "RRULE:FREQ=DAILY;COUNT=3;BYMONTH=2;BYMONTHDAY=29;BYDAYa=MO")

    assert result == [date(2020, 2, 29), date(2024, 2, 29), date(2028, 2, 29)]


def test_daily_interval_keeps_day_grid():
    """Test that every-other-day Saturdays stay on the start date's grid.

    From 2018-01-01 the grid is the odd days of January, so the first
    Saturday on it is the 13th.
    """
    rule = "RRULE:FREQ=DAILY;INTERVAL=2;COUNT=3;BYDAY=SA"

    result = generate(date(2018, 1, 1), rule)

    assert result == [date(2018, 1, 13), date(2018, 1, 27), date(2018, 2, 10)]
    assert result == expected_by_dateutil(date(2018, 1, 1), rule, 3)


@pytest.mark.parametrize(
    "rule",
    [
        "RRULE:FREQ=DAILY;INTERVAL=5",
        "RRULE:FREQ=DAILY;BYDAY=TU,TH",
        "RRULE:FREQ=DAILY;INTERVAL=2;BYDAY=MO,WE",
        "RRULE:FREQ=DAILY;INTERVAL=3;BYDAY=FR",
        "RRULE:FREQ=DAILY;BYMONTH=3,9",
        "RRULE:FREQ=DAILY;BYMONTHDAY=1,15",
        "RRULE:FREQ=DAILY;BYMONTHDAY=-1",
        "RRULE:FREQ=DAILY;BYMONTH=1;BYDAY=MO;INTERVAL=2",
    ],
)
def test_daily_matches_dateutil(rule):
    """Test daily rules against python-dateutil."""
    start = date(2018, 1, 1)

    assert generate(start, rule, 40) == expected_by_dateutil(start, rule, 40)


def test_daily_no_filter_round_trip():
    """Test that the Nth date is start + (N-1) * interval days."""
    result = generate(date(2018, 12, 30), "RRULE:FREQ=DAILY;INTERVAL=7;COUNT=10", 20)

    assert len(result) == 10
    assert result[-1] == date(2019, 3, 3)
