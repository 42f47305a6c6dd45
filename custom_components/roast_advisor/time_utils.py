"""Time helpers shared by the roast engine."""
from __future__ import annotations

from datetime import datetime, timedelta

from homeassistant.util import dt as dt_util

TimeLike = datetime | str


def to_datetime(value: TimeLike) -> datetime:
    """Return an aware UTC datetime for a datetime or ISO-8601 string."""
    if isinstance(value, str):
        parsed = dt_util.parse_datetime(value)
        if parsed is None:
            raise ValueError(f"Invalid ISO-8601 timestamp: {value!r}")
        value = parsed
    return dt_util.as_utc(value)


def to_iso(value: datetime | None) -> str | None:
    """Serialize a datetime for storage and attributes."""
    if value is None:
        return None
    return dt_util.as_utc(value).isoformat()


def minutes_between(start: TimeLike, end: TimeLike) -> float:
    """Minutes from start to end (negative if end is before start)."""
    return (to_datetime(end) - to_datetime(start)).total_seconds() / 60.0


def hours_between(start: TimeLike, end: TimeLike) -> float:
    return minutes_between(start, end) / 60.0


def add_minutes(value: TimeLike, minutes: float) -> datetime:
    return to_datetime(value) + timedelta(minutes=minutes)


def format_duration(minutes: float | None) -> str:
    """Human readable duration, e.g. '2h 30m' or '45m'."""
    if minutes is None:
        return "--"

    sign = "-" if minutes < 0 else ""
    abs_min = abs(minutes)
    if abs_min < 60:
        return f"{sign}{round(abs_min)}m"

    hours = int(abs_min // 60)
    rest = round(abs_min % 60)
    if rest == 60:
        hours += 1
        rest = 0
    if rest == 0:
        return f"{sign}{hours}h"
    return f"{sign}{hours}h {rest}m"
