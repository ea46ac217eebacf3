from __future__ import annotations

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Current time, timezone-aware.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def isoformat_or_none(value) -> str | None:
    return value.isoformat() if value else None
