from __future__ import annotations

from datetime import date, datetime, timezone


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD string, or a full ISO timestamp, into its calendar day.

    Anything else (trailing text, other layouts) raises ValueError.
    """
    text = value.strip()
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        pass
    if "T" not in text:
        raise ValueError(f"not an ISO date: {value!r}")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def now_local() -> datetime:
    """Current local time, naive (stored as-is in DATETIME columns)."""
    return datetime.now()
