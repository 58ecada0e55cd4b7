"""Filter validators for BYMONTH, BYMONTHDAY and BYDAY clauses.

Each validator answers two questions about a date:

- ``is_valid(value)``: does the date pass this one filter?
- ``next_closest_valid_date(value)``: where is the nearest date, no earlier
  than ``value``, worth probing next? Generators use it as a jump target; it
  ignores the other filters, so the result is a candidate, not an answer.

Validators are immutable once parsed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from . import dates
from .errors import FilterRangeError

DELIMITER = ","

_MONTH_RE = re.compile(r"^\d{1,2}$")
_MONTH_DAY_RE = re.compile(r"^[-+]?\d{1,2}$")
_WEEKDAY_RE = re.compile(r"^([-+]?\d)?([A-Za-z]{2})$")

# Longest run of months without a fifth occurrence of some weekday is short,
# 14 months always covers one.
_ORDINAL_SEARCH_MONTHS = 14


def _split(rule: str) -> list[str]:
    return [part.strip() for part in rule.split(DELIMITER)]


@dataclass(frozen=True)
class MonthValidator:
    """BYMONTH filter: a set of months 1..12."""

    months: frozenset[int]

    @classmethod
    def parse(cls, rule: str) -> MonthValidator:
        """Parse a comma-separated month list such as ``"1,6,12"``.

        Raises:
            FilterRangeError: If a token is not an integer in 1..12
        """
        months: set[int] = set()
        for token in _split(rule):
            if not _MONTH_RE.match(token):
                raise FilterRangeError(f"Invalid month: {token!r} in {rule!r}", token)
            month = int(token)
            if not 1 <= month <= 12:
                raise FilterRangeError(f"Invalid month: {token!r} in {rule!r}", token)
            months.add(month)
        return cls(frozenset(months))

    def is_valid(self, value: date) -> bool:
        return value.month in self.months

    def next_closest_valid_date(self, value: date) -> date:
        """First day of the next month (strictly after ``value``'s) in the set."""
        month = value.month
        steps = 0
        while True:
            month = month % 12 + 1
            steps += 1
            if month in self.months:
                break
        return dates.first_day_of_month(dates.plus_months(value, steps))


@dataclass(frozen=True)
class DayOfMonthValidator:
    """BYMONTHDAY filter.

    Positive references live in ``days`` (None when the rule has none).
    Negative references are stored as non-positive offsets from the last day
    of the month: -1 becomes 0, -2 becomes -1, and so on.
    """

    days: frozenset[int] | None
    offsets: tuple[int, ...] = ()

    @classmethod
    def parse(cls, rule: str) -> DayOfMonthValidator:
        """Parse a comma-separated day list such as ``"1,15,-1"``.

        Raises:
            FilterRangeError: If a token is malformed, zero, or outside -31..31
        """
        days: set[int] = set()
        offsets: set[int] = set()
        for token in _split(rule):
            if not _MONTH_DAY_RE.match(token):
                raise FilterRangeError(f"Invalid day of month: {token!r} in {rule!r}", token)
            day = int(token)
            if day == 0 or not -31 <= day <= 31:
                raise FilterRangeError(f"Invalid day of month: {token!r} in {rule!r}", token)
            if day < 0:
                offsets.add(day + 1)
            else:
                days.add(day)
        return cls(frozenset(days) if days else None, tuple(sorted(offsets)))

    def is_valid(self, value: date) -> bool:
        if self.days is not None and value.day in self.days:
            return True
        last = dates.last_day_of_month(value)
        return any(last + offset == value.day for offset in self.offsets)

    def next_closest_valid_date(self, value: date) -> date:
        """Nearest later candidate inside ``value``'s month.

        Falls back to the last day of the month when nothing in the month
        qualifies; callers step over the month boundary themselves.
        """
        current = value.day
        last = dates.last_day_of_month(value)

        if self.days is None:
            for offset in self.offsets:
                if last + offset > current:
                    return dates.plus_days(value, last + offset - current)
            return value.replace(day=last)

        day = current
        while day < last:
            day += 1
            if day in self.days:
                break
        gap = day - current

        for offset in self.offsets:
            delta = last + offset - current
            if 0 < delta < gap:
                return dates.plus_days(value, delta)
        return dates.plus_days(value, gap)


@dataclass(frozen=True)
class OrdinalWeekday:
    """A weekday qualified by its position in the month, e.g. -1FR."""

    ordinal: int
    weekday: int  # ISO, Monday=1

    def matches(self, value: date) -> bool:
        return dates.nth_weekday_of_month(value, self.ordinal, self.weekday) == value

    def __str__(self) -> str:
        return f"{self.ordinal}{dates.WEEKDAY_CODES[self.weekday - 1]}"


@dataclass(frozen=True)
class DayOfWeekValidator:
    """BYDAY filter: plain weekdays and/or ordinal weekdays.

    ``weekdays`` is None when the rule lists only ordinal forms.
    """

    weekdays: frozenset[int] | None
    ordinals: tuple[OrdinalWeekday, ...] = ()

    @classmethod
    def parse(cls, rule: str) -> DayOfWeekValidator:
        """Parse a BYDAY list such as ``"MO,WE"`` or ``"1MO,-1FR"``.

        Raises:
            FilterRangeError: If a token is not a weekday code, or its ordinal
                is zero or beyond the fifth occurrence
        """
        weekdays: set[int] = set()
        ordinals: list[OrdinalWeekday] = []
        for token in _split(rule):
            match = _WEEKDAY_RE.match(token)
            if not match:
                raise FilterRangeError(f"Invalid day of week: {token!r} in {rule!r}", token)
            try:
                weekday = dates.weekday_from_code(match.group(2))
            except KeyError:
                raise FilterRangeError(f"Invalid day of week: {token!r} in {rule!r}", token) from None
            if match.group(1) is None:
                weekdays.add(weekday)
                continue
            ordinal = int(match.group(1))
            if ordinal == 0 or abs(ordinal) > 5:
                raise FilterRangeError(f"Invalid day of week: {token!r} in {rule!r}", token)
            ordinal_day = OrdinalWeekday(ordinal, weekday)
            if ordinal_day not in ordinals:
                ordinals.append(ordinal_day)
        return cls(frozenset(weekdays) if weekdays else None, tuple(ordinals))

    def is_valid(self, value: date) -> bool:
        if self.weekdays is not None and value.isoweekday() in self.weekdays:
            return True
        return any(ordinal.matches(value) for ordinal in self.ordinals)

    def next_closest_valid_date(self, value: date) -> date:
        """Nearest later candidate.

        Plain weekdays are searched within the rest of ``value``'s week
        (stopping on Sunday). Ordinal weekdays are searched forward month by
        month; when both forms are present the earlier candidate wins.
        """
        candidates: list[date] = []
        if self.weekdays is not None:
            candidates.append(self._next_plain_weekday(value, self.weekdays))
        if self.ordinals:
            ordinal_date = self._next_ordinal_weekday(value)
            if ordinal_date is not None:
                candidates.append(ordinal_date)
        if not candidates:
            return value.replace(day=dates.last_day_of_month(value))
        return min(candidates)

    @staticmethod
    def _next_plain_weekday(value: date, weekdays: frozenset[int]) -> date:
        current = value.isoweekday()
        weekday = current
        while weekday < dates.SUNDAY:
            weekday += 1
            if weekday in weekdays:
                break
        return dates.plus_days(value, weekday - current)

    def _next_ordinal_weekday(self, value: date) -> date | None:
        month = dates.first_day_of_month(value)
        for _ in range(_ORDINAL_SEARCH_MONTHS):
            found = [
                day
                for day in (
                    dates.nth_weekday_of_month(month, o.ordinal, o.weekday) for o in self.ordinals
                )
                if day is not None and day > value
            ]
            if found:
                return min(found)
            month = dates.plus_months(month, 1)
        return None
