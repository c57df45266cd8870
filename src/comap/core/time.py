"""
Timezone handling for sensor timestamps.

Readings are stamped with timezone-aware datetimes so the API never mixes naive
and aware values.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo


def ensure_tz(dt: datetime, timezone: str) -> datetime:
    """Ensure `dt` has tzinfo; attach `timezone` if naive."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(timezone))
    return dt


def now_tz(timezone: str) -> datetime:
    return datetime.now(ZoneInfo(timezone))


def epoch_ms(dt: datetime) -> float:
    """Milliseconds since the Unix epoch (aware datetimes only)."""
    return dt.timestamp() * 1000.0
