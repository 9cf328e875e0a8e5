"""
Runtime configuration.

Values are read from the environment, with a `.env` file in the project root
loaded first.

Environment variables:
- SUPABASE_URL: Supabase project URL (needed only by repositories)
- SUPABASE_KEY: Supabase API key (use a server-side key only on the backend)
- LEDGER_TIMEZONE: IANA timezone for business dates (default: process local timezone)
- LOG_LEVEL: Root logging level (default: INFO)
"""

from __future__ import annotations

import os
from datetime import tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path)

SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")
LEDGER_TIMEZONE: str = os.getenv("LEDGER_TIMEZONE", "").strip()
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()


def get_ledger_timezone(name: Optional[str] = None) -> Optional[tzinfo]:
    """
    Resolve the timezone used for business dates.

    Args:
        name: IANA name; defaults to LEDGER_TIMEZONE

    Returns:
        ZoneInfo, or None to use the process's local timezone.

    Raises:
        ValueError: If the name is not a known IANA timezone
    """
    name = LEDGER_TIMEZONE if name is None else name.strip()
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone in LEDGER_TIMEZONE: {name!r}") from None


__all__ = [
    "LEDGER_TIMEZONE",
    "LOG_LEVEL",
    "SUPABASE_KEY",
    "SUPABASE_URL",
    "get_ledger_timezone",
]
