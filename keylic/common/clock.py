"""
Single source of the current time so validation and expiry arithmetic can be pinned in tests.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> datetime:
    """Midnight of the current UTC day."""
    return utc_now().replace(hour=0, minute=0, second=0, microsecond=0)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
