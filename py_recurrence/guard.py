"""Progress guard for rejection-skip loops.

Some filter combinations never produce a date (BYMONTH=2;BYMONTHDAY=30) and
the generators would skip forward forever. The guard counts steps inside a
time window and raises once the count passes the threshold. Callers reset it
before each unit of work so that only the steps spent on that unit count:

    guard = ProgressGuard(max_steps=10000, window_ms=1000)
    guard.reset()
    while not valid(cursor):
        guard.tick()
        cursor = jump(cursor)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .config import GuardConfig
from .errors import ProgressGuardError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ProgressGuard:
    """Rate-limiting step counter with an injectable clock.

    The clock returns seconds (``time.monotonic`` by default).
    """

    def __init__(
        self,
        max_steps: int = 10000,
        window_ms: int = 1000,
        clock: Clock | None = None,
    ) -> None:
        self.max_steps = max_steps
        self.window_ms = window_ms
        self._clock = clock or time.monotonic
        self._window_start: float | None = None
        self.count = 0

    @classmethod
    def from_config(cls, config: GuardConfig, clock: Clock | None = None) -> ProgressGuard:
        return cls(max_steps=config.max_steps, window_ms=config.window_ms, clock=clock)

    def reset(self) -> None:
        """Forget the steps counted so far and start a new window on the next tick."""
        self._window_start = None
        self.count = 0

    def tick(self) -> None:
        """Count one step.

        Raises:
            ProgressGuardError: If more than ``max_steps`` steps were counted
                in the current window
        """
        now = self._clock()
        if self._window_start is None or (now - self._window_start) * 1000 > self.window_ms:
            self._window_start = now
            self.count = 0
        self.count += 1
        if self.count > self.max_steps:
            logger.warning(
                f"Progress guard tripped: {self.count} steps within {self.window_ms}ms"
            )
            raise ProgressGuardError(
                f"infinite loop detected: more than {self.max_steps} steps "
                f"within {self.window_ms}ms",
                steps=self.count,
            )
