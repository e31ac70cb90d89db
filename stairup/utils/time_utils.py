"""
Clock and duration helpers.

All instants handled by the application are timezone-aware UTC datetimes.
Naive datetimes (as returned by some database drivers) are taken to be UTC.
"""

import math
from datetime import datetime, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (a trailing 'Z' is accepted) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Whole seconds from start to end, floored and never negative."""
    delta = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return max(0, math.floor(delta))


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format a duration as mm:ss, or hh:mm:ss once it reaches one hour.

    Fractional and negative inputs are floored and clamped to zero.
    The hours field is not bounded.
    """
    total = max(0, math.floor(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
