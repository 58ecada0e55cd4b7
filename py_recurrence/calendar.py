"""Bounded iteration over the dates of a recurrence rule."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date

from .config import GuardConfig
from .errors import ExhaustionError
from .generators import RecurrenceGenerator, create_generator
from .guard import Clock, ProgressGuard
from .rule import RecurrenceRule, parse_rule

logger = logging.getLogger(__name__)


class RecurrenceCalendar:
    """Dates produced by ``rule`` from ``start``, limited by COUNT and UNTIL.

    ``has_more()`` can be called any number of times; it only pulls a new
    date from the generator when none is buffered. Once a generated date
    passes UNTIL the calendar stays exhausted.

    Args:
        start: First date considered (produced if it matches the rule)
        rule: A parsed RecurrenceRule or its ``RRULE:`` text
        config: Progress guard thresholds, defaults from the environment
        clock: Clock for the progress guard, in seconds

    Example:
        >>> cal = RecurrenceCalendar(date(2018, 1, 1), "RRULE:FREQ=DAILY;COUNT=2")
        >>> list(cal)
        [datetime.date(2018, 1, 1), datetime.date(2018, 1, 2)]
    """

    def __init__(
        self,
        start: date,
        rule: RecurrenceRule | str,
        *,
        config: GuardConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        if isinstance(rule, str):
            rule = parse_rule(rule)
        self.start = start
        self.rule = rule
        self.guard = ProgressGuard.from_config(config or GuardConfig(), clock)
        self.produced = 0
        self._generator: RecurrenceGenerator = create_generator(rule, start, self.guard)
        self._pending: date | None = None
        self._finished = False
        logger.debug(
            f"Created {type(self._generator).__name__} for {rule} from {start.isoformat()}"
        )

    def has_more(self) -> bool:
        """Whether another date is available.

        Raises:
            ProgressGuardError: If the rule's filters keep rejecting dates
                without converging
        """
        if self._pending is not None:
            return True
        if self._finished:
            return False
        if self.rule.count and self.produced >= self.rule.count:
            logger.debug(f"Count of {self.rule.count} reached for {self.rule}")
            self._finished = True
            return False

        # the guard bounds the steps spent on this one date
        self.guard.reset()
        self.guard.tick()
        try:
            candidate = self._generator.next()
        except OverflowError:
            logger.debug(f"Calendar range exhausted for {self.rule}")
            self._finished = True
            return False

        if self.rule.until is not None and candidate > self.rule.until:
            logger.debug(
                f"{candidate.isoformat()} is past until {self.rule.until.isoformat()} for {self.rule}"
            )
            self._finished = True
            return False

        self._pending = candidate
        self.produced += 1
        return True

    def produce_next(self) -> date:
        """Return the next date.

        Raises:
            ExhaustionError: If the recurrence has no more dates
        """
        self.has_more()
        result, self._pending = self._pending, None
        if result is None:
            raise ExhaustionError(f"No more recurrence for {self.rule}")
        return result

    def take(self, n: int) -> list[date]:
        """Up to ``n`` next dates; fewer when the recurrence ends first."""
        result: list[date] = []
        while len(result) < n and self.has_more():
            result.append(self.produce_next())
        return result

    def __iter__(self) -> Iterator[date]:
        return self

    def __next__(self) -> date:
        if not self.has_more():
            raise StopIteration
        return self.produce_next()
