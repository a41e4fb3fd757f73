"""Unit tests for day keys."""

from datetime import UTC, datetime

import pytest

from src.store.days import day_key_for, validate_day_key
from src.store.errors import InvalidDayError


class TestValidateDayKey:
    """Tests for validate_day_key."""

    def test_valid_key(self) -> None:
        """Test a well-formed date passes through."""
        assert validate_day_key("2026-03-01") == "2026-03-01"

    @pytest.mark.parametrize(
        "day", ["2026-3-1", "20260301", "../etc/passwd", "2026-02-30", ""]
    )
    def test_invalid_keys(self, day: str) -> None:
        """Test malformed or impossible dates are rejected."""
        with pytest.raises(InvalidDayError):
            validate_day_key(day)


class TestDayKeyFor:
    """Tests for day_key_for."""

    def test_timezone_shifts_day(self) -> None:
        """Test that the configured timezone decides the calendar day."""
        moment = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)

        assert day_key_for(moment, "UTC") == "2026-03-01"
        assert day_key_for(moment, "Asia/Shanghai") == "2026-03-02"

    def test_naive_time_is_utc(self) -> None:
        """Test that naive timestamps are read as UTC."""
        assert day_key_for(datetime(2026, 3, 1, 23, 30), "UTC") == "2026-03-01"
