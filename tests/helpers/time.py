"""Shared, deterministic timestamps for tests."""

from datetime import UTC, datetime, timedelta


# Fixed "now" so decay scores and ledger windows are reproducible.
FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)
FIXED_DAY = "2026-03-01"


def hours_before(hours: float, now: datetime = FIXED_NOW) -> datetime:
    """Timestamp ``hours`` before ``now``."""
    return now - timedelta(hours=hours)
