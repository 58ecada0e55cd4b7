"""Tests for BYSETPOS selection within each period."""

from datetime import date, datetime

import pytest
from dateutil.rrule import rrulestr

from py_recurrence import GuardConfig, ProgressGuardError, RecurrenceCalendar

WEEKDAYS = "BYDAY=MO,TU,WE,TH,FR"


def generate(start: date, rule: str, n: int = 5) -> list[date]:
    return RecurrenceCalendar(start, rule).take(n)


def expected_by_dateutil(start: date, rule: str, n: int) -> list[date]:
    body = rule.removeprefix("RRULE:")
    dtstart = datetime(start.year, start.month, start.day)
    return [d.date() for d in rrulestr(body, dtstart=dtstart)[:n]]


def test_first_weekday_of_month():
    """Test BYSETPOS=1 over the weekdays of each month."""
    result = generate(date(2018, 1, 1), f"RRULE:FREQ=MONTHLY;{WEEKDAYS};BYSETPOS=1")

    assert result == [
        date(2018, 1, 1),
        date(2018, 2, 1),
        date(2018, 3, 1),
        date(2018, 4, 2),
        date(2018, 5, 1),
    ]


def test_last_weekday_of_month():
    """Test negative positions count from the end of the period."""
    result = generate(date(2018, 1, 1), f"RRULE:FREQ=MONTHLY;{WEEKDAYS};BYSETPOS=-1")

    assert result == [
        date(2018, 1, 31),
        date(2018, 2, 28),
        date(2018, 3, 30),
        date(2018, 4, 30),
        date(2018, 5, 31),
    ]


def test_several_positions_are_emitted_in_date_order():
    """Test that positions -1 and 1 yield two sorted dates per month."""
    result = generate(date(2018, 1, 1), f"RRULE:FREQ=MONTHLY;{WEEKDAYS};BYSETPOS=-1,1", 4)

    assert result == [date(2018, 1, 1), date(2018, 1, 31), date(2018, 2, 1), date(2018, 2, 28)]


def test_positions_count_the_whole_first_period():
    """Test that a mid-month start still counts positions from the 1st."""
    result = generate(date(2018, 1, 15), f"RRULE:FREQ=MONTHLY;{WEEKDAYS};BYSETPOS=1", 3)

    assert result == [date(2018, 2, 1), date(2018, 3, 1), date(2018, 4, 2)]


def test_weekly_positions():
    """Test selection inside Monday-based weeks."""
    result = generate(date(2018, 1, 3), "RRULE:FREQ=WEEKLY;BYDAY=MO,WE,FR;BYSETPOS=-1", 3)

    assert result == [date(2018, 1, 5), date(2018, 1, 12), date(2018, 1, 19)]


def test_count_applies_after_selection():
    """Test that COUNT limits selected dates, not candidates."""
    cal = RecurrenceCalendar(date(2018, 1, 1), f"RRULE:FREQ=MONTHLY;{WEEKDAYS};BYSETPOS=-1;COUNT=2")

    assert list(cal) == [date(2018, 1, 31), date(2018, 2, 28)]


@pytest.mark.parametrize(
    "start,rule",
    [
        (date(2018, 1, 1), f"RRULE:FREQ=MONTHLY;{WEEKDAYS};BYSETPOS=-1"),
        (date(2018, 1, 15), f"RRULE:FREQ=MONTHLY;{WEEKDAYS};BYSETPOS=1,-2"),
        (date(2018, 1, 1), "RRULE:FREQ=MONTHLY;BYDAY=TU,TH;BYSETPOS=3"),
        (date(2018, 1, 1), "RRULE:FREQ=MONTHLY;BYMONTHDAY=1,15,-1;BYSETPOS=2"),
    ],
)
def test_set_position_matches_dateutil(start, rule):
    """Test BYSETPOS against python-dateutil."""
    assert generate(start, rule, 20) == expected_by_dateutil(start, rule, 20)


def test_missing_position_trips_guard():
    """Test that a position no period can fill is reported, not looped on."""
    cal = RecurrenceCalendar(
        date(2018, 1, 1),
        "RRULE:FREQ=DAILY;BYSETPOS=2",
        config=GuardConfig(max_steps=100, window_ms=1000),
        clock=lambda: 0.0,
    )

    with pytest.raises(ProgressGuardError):
        cal.has_more()


def test_period_cut_short_by_end_of_range_is_still_selected():
    """Test that the last representable month still yields its selected date."""
    cal = RecurrenceCalendar(date(9999, 12, 1), "RRULE:FREQ=MONTHLY;BYDAY=MO;BYSETPOS=-1")

    assert cal.take(5) == [date(9999, 12, 27)]
    assert not cal.has_more()
