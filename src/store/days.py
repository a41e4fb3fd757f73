"""Calendar day keys used to name daily snapshots."""

import re
import zoneinfo
from datetime import UTC, date, datetime

from src.store.errors import InvalidDayError


_DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_day_key(day: str) -> str:
    """Validate a ``YYYY-MM-DD`` day key.

    Args:
        day: Candidate day key.

    Returns:
        The same key, unchanged.

    Raises:
        InvalidDayError: If the key is malformed or not a real date.
    """
    if not isinstance(day, str) or not _DAY_PATTERN.match(day):
        raise InvalidDayError(str(day))
    try:
        date.fromisoformat(day)
    except ValueError as e:
        raise InvalidDayError(day) from e
    return day


def day_key_for(now: datetime | None = None, timezone: str | None = None) -> str:
    """Compute the day key for a moment.

    Args:
        now: Moment to convert (defaults to current time).
        timezone: IANA timezone name; process-local time when omitted.

    Returns:
        Day key in ``YYYY-MM-DD`` form.

    Raises:
        zoneinfo.ZoneInfoNotFoundError: If the timezone is unknown.
    """
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    local = now.astimezone(zoneinfo.ZoneInfo(timezone)) if timezone else now.astimezone()
    return local.strftime("%Y-%m-%d")
