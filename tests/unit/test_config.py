"""Tests for progress guard configuration."""

import logging

import pytest

from py_recurrence import config
from py_recurrence.config import GuardConfig


def test_defaults():
    """Test the documented default thresholds."""
    assert config.DEFAULT_MAX_STEPS == 10000
    assert config.DEFAULT_WINDOW_MS == 1000


def test_from_env(monkeypatch):
    """Test reading thresholds from the environment."""
    monkeypatch.setenv("PY_RECURRENCE_GUARD_MAX_STEPS", "250")
    monkeypatch.setenv("PY_RECURRENCE_GUARD_WINDOW_MS", " 50 ")

    cfg = GuardConfig.from_env()

    assert cfg.max_steps == 250
    assert cfg.window_ms == 50


def test_from_env_unset_uses_defaults(monkeypatch):
    """Test that missing variables fall back to the defaults."""
    monkeypatch.delenv("PY_RECURRENCE_GUARD_MAX_STEPS", raising=False)
    monkeypatch.delenv("PY_RECURRENCE_GUARD_WINDOW_MS", raising=False)

    cfg = GuardConfig.from_env()

    assert cfg == GuardConfig(max_steps=10000, window_ms=1000)


@pytest.mark.parametrize("raw", ["lots", "-5", "0"])
def test_from_env_bad_value_warns(monkeypatch, caplog, raw):
    """Test that unusable values are ignored with a warning."""
    monkeypatch.setenv("PY_RECURRENCE_GUARD_MAX_STEPS", raw)

    with caplog.at_level(logging.WARNING, logger="py_recurrence.config"):
        cfg = GuardConfig.from_env()

    assert cfg.max_steps == config.DEFAULT_MAX_STEPS
    assert "PY_RECURRENCE_GUARD_MAX_STEPS" in caplog.text


def test_rejects_non_positive_values():
    """Test validation on direct construction."""
    with pytest.raises(ValueError, match="max_steps"):
        GuardConfig(max_steps=0)
    with pytest.raises(ValueError, match="window_ms"):
        GuardConfig(window_ms=-1)
