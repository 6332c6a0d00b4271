"""
Timezone utilities for the Disciplix platform.

All instants are handled in UTC. Some backends (SQLite) hand back naive
datetimes; those are interpreted as UTC.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Args:
        dt: Naive (assumed UTC) or aware datetime

    Returns:
        The same instant as an aware UTC datetime, or None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 string with a trailing Z."""
    value = ensure_utc(dt)
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")
