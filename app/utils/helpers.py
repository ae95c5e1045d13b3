"""
Helper Functions
================

Common utility functions used across the application.
"""

import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

_clock_lock = threading.Lock()
_last_now: Optional[datetime] = None


def generate_uuid() -> uuid.UUID:
    """Generate a new UUID v4."""
    return uuid.uuid4()


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Values are strictly increasing within the process: when the wall clock
    has not advanced (or went backwards) the previous value plus one
    microsecond is returned instead.
    """
    global _last_now

    with _clock_lock:
        now = datetime.now(timezone.utc)
        if _last_now is not None and now <= _last_now:
            now = _last_now + timedelta(microseconds=1)
        _last_now = now
        return now


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime to an ISO 8601 UTC string."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()


def parse_datetime(value: str) -> datetime:
    """
    Parse ISO 8601 date or datetime string to an aware UTC datetime.

    Raises:
        ValueError: If the string is not ISO 8601
    """
    return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
