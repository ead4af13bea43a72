"""
Date/time helpers: framework-agnostic.

The auth flow persists timestamps the way the browser portal did
(epoch milliseconds as strings), so conversion lives here in one place.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """Convert *dt* to integer epoch milliseconds (naive values are UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def from_epoch_ms(value: Any) -> Optional[datetime]:
    """Parse epoch milliseconds (int or numeric string) into a UTC datetime.

    Returns ``None`` for ``None`` and for values that are not integers.
    """
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OSError, OverflowError):
        return None


def ensure_aware(dt: datetime) -> datetime:
    """Assume UTC for naive datetimes (MongoDB returns naive UTC values)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def format_countdown(milliseconds: int) -> str:
    """Format a remaining duration as ``m:ss`` (negative values clamp to 0)."""
    milliseconds = max(0, int(milliseconds))
    minutes = milliseconds // 60000
    seconds = (milliseconds % 60000) // 1000
    return f"{minutes}:{seconds:02d}"
