"""Column Types — timestamps that are timezone-aware UTC on both sides of the driver.

Invariants:
    - Values written are converted to UTC
    - Values read are always aware UTC, even from drivers that drop tzinfo (SQLite)
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from learnhub.core.clock import ensure_utc


class UTCDateTime(TypeDecorator):
    """DateTime(timezone=True) that never hands back a naive datetime."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        return ensure_utc(value) if value is not None else None
