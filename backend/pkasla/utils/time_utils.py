from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return timezone-aware UTC timestamp for defaults."""
    return datetime.now(timezone.utc)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes.

    SQLite drops tzinfo on the way back out, so values read from it are
    normalized before being compared with ``utcnow()``.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 string with a trailing Z for UTC values."""
    if value is None:
        return None
    aware = ensure_aware(value)
    return aware.isoformat().replace("+00:00", "Z")


def epoch_ms(value: Optional[datetime] = None) -> int:
    """Milliseconds since the epoch for ``value`` (default now)."""
    return int((ensure_aware(value) or utcnow()).timestamp() * 1000)


def add_months(value: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
