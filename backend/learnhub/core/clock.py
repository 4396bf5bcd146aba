"""Clock helpers — timezone-aware UTC timestamps.

Invariants:
    - Every timestamp the app produces is timezone-aware UTC
    - ensure_utc() normalizes naive values read back from drivers that drop tzinfo (SQLite)
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
