"""Tests for clock and logging helpers."""

import logging
from datetime import date, datetime, timedelta, timezone

from booklend.utils.clock import start_of_day, to_naive_utc, utcnow
from booklend.utils.logging import get_logger


class TestClock:
    """Tests for UTC clock helpers."""

    def test_utcnow_is_naive(self):
        """utcnow carries no tzinfo."""
        assert utcnow().tzinfo is None

    def test_to_naive_utc_converts_aware(self):
        """Aware datetimes are shifted to UTC."""
        aware = datetime(2024, 3, 15, 10, 0, tzinfo=timezone(timedelta(hours=2)))

        assert to_naive_utc(aware) == datetime(2024, 3, 15, 8, 0)

    def test_to_naive_utc_keeps_naive(self):
        """Naive datetimes are taken as UTC already."""
        value = datetime(2024, 3, 15, 10, 0)

        assert to_naive_utc(value) is value

    def test_start_of_day(self):
        """Midnight at the start of the day."""
        assert start_of_day(date(2024, 3, 18)) == datetime(2024, 3, 18, 0, 0)


class TestGetLogger:
    """Tests for get_logger."""

    def test_single_handler(self):
        """Repeated calls do not stack handlers."""
        first = get_logger("booklend.tests.single", level="DEBUG")
        second = get_logger("booklend.tests.single", level="DEBUG")

        assert first is second
        assert len(first.handlers) == 1
        assert first.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        """An unknown level name means INFO."""
        logger = get_logger("booklend.tests.fallback", level="chatty")

        assert logger.level == logging.INFO
