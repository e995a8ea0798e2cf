"""Datetime utility functions."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from shop.config import settings

# Timezone for order number prefixes and API responses (from config)
LOCAL_TIMEZONE = ZoneInfo(settings.timezone)


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def now_local() -> datetime:
    """Return current datetime in the configured local timezone."""
    return datetime.now(LOCAL_TIMEZONE)


def to_local_timezone(dt: datetime | None) -> datetime | None:
    """Convert a datetime to the configured local timezone.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Datetime in local timezone, or None if input was None
    """
    if dt is None:
        return None
    # Ensure datetime is timezone-aware (assume UTC if naive)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(LOCAL_TIMEZONE)
