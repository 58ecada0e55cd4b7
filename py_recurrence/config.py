"""Configuration for the progress guard.

Defaults can be overridden through the environment:

    PY_RECURRENCE_GUARD_MAX_STEPS   steps allowed per window (default: 10000)
    PY_RECURRENCE_GUARD_WINDOW_MS   window length in milliseconds (default: 1000)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 10000
DEFAULT_WINDOW_MS = 1000


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring {name}={raw!r}: must be positive, using {default}")
        return default
    return value


GUARD_MAX_STEPS = _env_int("PY_RECURRENCE_GUARD_MAX_STEPS", DEFAULT_MAX_STEPS)
GUARD_WINDOW_MS = _env_int("PY_RECURRENCE_GUARD_WINDOW_MS", DEFAULT_WINDOW_MS)


@dataclass
class GuardConfig:
    """Thresholds for detecting filter combinations that never converge."""

    max_steps: int = GUARD_MAX_STEPS
    window_ms: int = GUARD_WINDOW_MS

    def __post_init__(self) -> None:
        if self.max_steps <= 0:
            raise ValueError(f"max_steps must be positive, got {self.max_steps}")
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")

    @classmethod
    def from_env(cls) -> GuardConfig:
        """Re-read the environment (module defaults are read once at import)."""
        return cls(
            max_steps=_env_int("PY_RECURRENCE_GUARD_MAX_STEPS", DEFAULT_MAX_STEPS),
            window_ms=_env_int("PY_RECURRENCE_GUARD_WINDOW_MS", DEFAULT_WINDOW_MS),
        )
