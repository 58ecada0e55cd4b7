"""Frequency generators.

A generator owns one date cursor, starts it at the recurrence start date and
only ever moves it forward. ``next()`` returns the first cursor position that
passes every active validator. While the cursor is rejected the generator
jumps toward the nearest plausible candidate instead of stepping one day at a
time; after a date is returned the cursor advances by one unit so the same
date is never produced twice.

The generator for a rule is picked once, by ``create_generator``.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from . import dates
from .guard import ProgressGuard
from .rule import Frequency, RecurrenceRule
from .validators import DayOfMonthValidator, DayOfWeekValidator, MonthValidator


class RecurrenceGenerator(Protocol):
    """Produces an endless, strictly increasing sequence of matching dates."""

    def next(self) -> date: ...


@dataclass(frozen=True)
class _Filters:
    """The validators of a rule; a missing validator accepts every date."""

    month: MonthValidator | None
    day_of_month: DayOfMonthValidator | None
    day_of_week: DayOfWeekValidator | None

    @classmethod
    def from_rule(cls, rule: RecurrenceRule) -> _Filters:
        return cls(rule.month_validator, rule.day_of_month_validator, rule.day_of_week_validator)

    def month_valid(self, value: date) -> bool:
        return self.month is None or self.month.is_valid(value)

    def day_of_month_valid(self, value: date) -> bool:
        return self.day_of_month is None or self.day_of_month.is_valid(value)

    def day_of_week_valid(self, value: date) -> bool:
        return self.day_of_week is None or self.day_of_week.is_valid(value)

    def is_valid(self, value: date) -> bool:
        return (
            self.month_valid(value)
            and self.day_of_month_valid(value)
            and self.day_of_week_valid(value)
        )

    def rejection_target(self, value: date) -> date | None:
        """Jump target of the first failing validator (month, day of month, weekday)."""
        if self.month is not None and not self.month.is_valid(value):
            return self.month.next_closest_valid_date(value)
        if self.day_of_month is not None and not self.day_of_month.is_valid(value):
            return self.day_of_month.next_closest_valid_date(value)
        if self.day_of_week is not None and not self.day_of_week.is_valid(value):
            return self.day_of_week.next_closest_valid_date(value)
        return None


class _CursorGenerator:
    """Shared rejection-skip loop; subclasses define how the cursor moves."""

    def __init__(
        self,
        rule: RecurrenceRule,
        start_date: date,
        guard: ProgressGuard | None = None,
    ) -> None:
        self.interval = rule.interval
        self.cursor = start_date
        self._filters = _Filters.from_rule(rule)
        self._guard = guard
        self._advance_pending = False

    def next(self) -> date:
        if self._advance_pending:
            self._advance_pending = False
            self._move_cursor()
        while not self._filters.is_valid(self.cursor):
            if self._guard is not None:
                self._guard.tick()
            self._move_cursor()
        self._advance_pending = True
        return self.cursor

    def _move_cursor(self) -> None:
        raise NotImplementedError


class DailyGenerator(_CursorGenerator):
    """FREQ=DAILY: every ``interval`` days, narrowed by the BY* filters."""

    def _move_cursor(self) -> None:
        target = self._filters.rejection_target(self.cursor)
        if target is None:
            self.cursor = dates.plus_days(self.cursor, self.interval)
        else:
            self._move_close_to(target)

    def _move_close_to(self, target: date) -> None:
        if target == self.cursor:
            self.cursor = dates.plus_days(self.cursor, self.interval)
            return
        if self.interval > 1:
            # stay on the day grid anchored at the start date
            remainder = dates.days_between(self.cursor, target) % self.interval
            if remainder:
                target = dates.plus_days(target, self.interval - remainder)
        self.cursor = target


class WeeklyGenerator(_CursorGenerator):
    """FREQ=WEEKLY: weeks ``interval`` apart, Monday-based."""

    def _move_cursor(self) -> None:
        filters = self._filters
        if filters.day_of_week is None and filters.day_of_month is None:
            self.cursor = dates.plus_weeks(self.cursor, self.interval)
            return
        if self.cursor.isoweekday() == dates.SUNDAY:
            # end of a week block: skip straight to the next block's Monday
            self.cursor = dates.plus_days(self.cursor, (self.interval - 1) * 7 + 1)
            return

        target = filters.rejection_target(self.cursor)
        if target is None:
            self.cursor = dates.plus_days(self.cursor, 1)
        else:
            self._move_close_to(target)

    def _move_close_to(self, target: date) -> None:
        if target == self.cursor:
            self.cursor = dates.plus_days(self.cursor, 1)
            return
        if self.interval > 1:
            days = dates.days_between(self.cursor, target)
            remainder_weeks = (days // 7) % self.interval
            if remainder_weeks:
                if self.cursor.isoweekday() + days % 7 > 7:
                    # the target already sits in the following week
                    remainder_weeks += 1
                target = dates.plus_weeks(target, self.interval - remainder_weeks)
                target = dates.previous_or_same_monday(target)
        self.cursor = target


class MonthlyGenerator(_CursorGenerator):
    """FREQ=MONTHLY: months ``interval`` apart."""

    def _move_cursor(self) -> None:
        filters = self._filters
        if filters.day_of_month is None and filters.day_of_week is None:
            # same day of month, skipping months too short to hold it
            day = self.cursor.day
            months = self.interval
            candidate = dates.plus_months(self.cursor, months)
            while candidate.day != day:
                months += self.interval
                candidate = dates.plus_months(self.cursor, months)
            self.cursor = candidate
            return

        if not filters.month_valid(self.cursor) or dates.is_last_day_of_month(self.cursor):
            self.cursor = dates.first_day_of_month(dates.plus_months(self.cursor, self.interval))
            return

        if filters.day_of_month is not None:
            self.cursor = filters.day_of_month.next_closest_valid_date(self.cursor)
        else:
            self.cursor = dates.plus_days(self.cursor, 1)


GENERATORS: dict[Frequency, type[_CursorGenerator]] = {
    Frequency.DAILY: DailyGenerator,
    Frequency.WEEKLY: WeeklyGenerator,
    Frequency.MONTHLY: MonthlyGenerator,
}


def period_start(freq: Frequency, value: date) -> date:
    """First day of the period (day, week or month) that contains ``value``."""
    if freq is Frequency.WEEKLY:
        return dates.previous_or_same_monday(value)
    if freq is Frequency.MONTHLY:
        return dates.first_day_of_month(value)
    return value


class SetPositionSelector:
    """Applies BYSETPOS to the output of a frequency generator.

    All candidates of one period are collected, then the members at the
    requested positions (1-based, negative from the end) are emitted in
    date order. Members before ``not_before`` are dropped. Each period
    examined counts as one step of the progress guard.
    """

    def __init__(
        self,
        generator: RecurrenceGenerator,
        freq: Frequency,
        positions: tuple[int, ...],
        not_before: date | None = None,
        guard: ProgressGuard | None = None,
    ) -> None:
        self._generator = generator
        self._freq = freq
        self._positions = positions
        self._not_before = not_before
        self._guard = guard
        self._lookahead: date | None = None
        self._pending: deque[date] = deque()
        self._exhausted = False

    def next(self) -> date:
        while not self._pending:
            if self._exhausted:
                raise OverflowError("date range exhausted after the last period")
            if self._guard is not None:
                self._guard.tick()
            self._pending.extend(self._select(self._collect_period()))
        return self._pending.popleft()

    def _collect_period(self) -> list[date]:
        first = self._lookahead if self._lookahead is not None else self._generator.next()
        self._lookahead = None
        period = period_start(self._freq, first)
        members = [first]
        while True:
            try:
                candidate = self._generator.next()
            except OverflowError:
                # the date range ends inside this period: select from what exists
                self._exhausted = True
                return members
            if period_start(self._freq, candidate) != period:
                self._lookahead = candidate
                return members
            members.append(candidate)

    def _select(self, members: list[date]) -> list[date]:
        size = len(members)
        selected: set[date] = set()
        for position in self._positions:
            index = position - 1 if position > 0 else size + position
            if 0 <= index < size:
                selected.add(members[index])
        return sorted(
            d for d in selected if self._not_before is None or d >= self._not_before
        )


def create_generator(
    rule: RecurrenceRule,
    start_date: date,
    guard: ProgressGuard | None = None,
) -> RecurrenceGenerator:
    """Build the generator for ``rule`` starting at ``start_date``.

    Rules with BYSETPOS get their frequency generator wrapped in a
    SetPositionSelector. When such a rule filters by day, generation starts at
    the beginning of the start date's period so positions count the whole
    period.
    """
    generator_class = GENERATORS[rule.freq]
    if not rule.set_positions:
        return generator_class(rule, start_date, guard)

    day_filtered = (
        rule.day_of_month_validator is not None or rule.day_of_week_validator is not None
    )
    first = period_start(rule.freq, start_date) if day_filtered else start_date
    return SetPositionSelector(
        generator_class(rule, first, guard),
        rule.freq,
        rule.set_positions,
        not_before=start_date,
        guard=guard,
    )
