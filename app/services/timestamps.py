"""
UTC timestamp helpers shared by the stores.

Timestamps are stored as naive UTC datetimes.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

RESOLUTION = timedelta(microseconds=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def next_timestamp(previous: Optional[datetime], now: Optional[datetime] = None) -> datetime:
    """Current time, nudged forward so it is strictly later than previous."""
    current = now or utcnow()
    if previous is not None and current <= previous:
        return previous + RESOLUTION
    return current
