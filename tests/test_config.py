"""Tests for environment-driven settings."""

import logging

from dicepool.config import Settings


class TestLogLevel:
    def test_default(self) -> None:
        assert Settings().log_level == "WARNING"

    def test_lower_case_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("DICEPOOL_LOG_LEVEL", "debug")
        assert Settings().log_level == "DEBUG"

    def test_level_is_known_to_logging(self) -> None:
        level = Settings(log_level="info").log_level
        assert logging.getLevelName(level) == logging.INFO
