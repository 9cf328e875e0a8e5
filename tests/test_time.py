"""
Tests for `domain/time.py`.

Covers:
- Supabase timestamp parsing to UTC
- Local calendar-date projection across day boundaries
- Business date validation
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from domain.time import parse_utc_datetime, require_date_string, to_local_date_string


@pytest.mark.parametrize(
    "value",
    [
        "2026-02-13T07:00:00Z",
        "2026-02-13T07:00:00+00:00",
        "2026-02-13T01:00:00-06:00",
        "2026-02-13T07:00:00",
        datetime(2026, 2, 13, 7, 0, tzinfo=timezone.utc),
    ],
)
def test_parse_utc_datetime(value) -> None:
    parsed = parse_utc_datetime(value)

    assert parsed == datetime(2026, 2, 13, 7, 0, tzinfo=timezone.utc)
    assert parsed.utcoffset() == timedelta(0)


def test_parse_utc_datetime_rejects_unknown_types() -> None:
    with pytest.raises(TypeError):
        parse_utc_datetime(1770966000)


def test_local_date_uses_local_calendar_day() -> None:
    guatemala = ZoneInfo("America/Guatemala")
    late_evening = datetime(2026, 2, 14, 5, 0, tzinfo=timezone.utc)  # 23:00 on Feb 13 in Guatemala

    assert to_local_date_string(late_evening, guatemala) == "2026-02-13"
    assert to_local_date_string(late_evening, timezone.utc) == "2026-02-14"


def test_local_date_is_zero_padded() -> None:
    assert to_local_date_string(datetime(2026, 3, 5, 12, tzinfo=timezone.utc), timezone.utc) == "2026-03-05"


def test_require_date_string() -> None:
    require_date_string("start_date", "2026-02-13")

    with pytest.raises(ValueError, match="start_date"):
        require_date_string("start_date", "2026/02/13")
