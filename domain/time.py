"""
Domain time utilities (pure).

Centralized timestamp validation, parsing, and calendar-date projection.

Ledger timestamps are stored as UTC instants. Business filters (date ranges,
daily cash close) work on calendar dates in the store's local timezone, so a
sale made at 23:00 local time never slides into the next day.

Behavior and error messages must remain consistent across the domain model.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Optional


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the requirement that stored timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    Naive values are assumed to already be UTC.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local_date_string(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """
    Project an instant onto its local calendar date as ``YYYY-MM-DD``.

    Args:
        value: Timezone-aware instant (naive values are treated as UTC)
        tz: Target timezone; None means the process's local timezone

    Returns:
        Zero-padded ISO date string, safe for lexicographic comparison.

    Example:
        >>> to_local_date_string(datetime(2026, 2, 14, 5, 0, tzinfo=timezone.utc), ZoneInfo("America/Guatemala"))
        '2026-02-13'
    """

    if value.tzinfo is None or value.utcoffset() is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(tz) if tz is not None else value.astimezone()
    return f"{local.year:04d}-{local.month:02d}-{local.day:02d}"


def require_date_string(name: str, value: str) -> None:
    """Validate a ``YYYY-MM-DD`` business date string."""

    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise ValueError(f"{name} must be a YYYY-MM-DD date, got {value!r}") from None
    # strptime accepts "2026-2-1"; lexical comparison needs zero padding.
    if parsed.strftime("%Y-%m-%d") != value:
        raise ValueError(f"{name} must be a zero-padded YYYY-MM-DD date, got {value!r}")


__all__ = [
    "parse_utc_datetime",
    "require_date_string",
    "require_utc_timestamp",
    "to_local_date_string",
]
