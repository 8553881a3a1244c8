"""Date manipulation utilities"""

import math
from datetime import date, datetime, time, timezone

SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day_utc(day: date) -> datetime:
    """Midnight UTC at the start of a calendar date"""
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def days_between(now: datetime, target: date) -> int:
    """Whole days from now until target, rounded up (negative for past dates)"""
    delta = start_of_day_utc(target) - ensure_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)
