from __future__ import annotations

"""Utility helpers for event parsing."""

from datetime import datetime, tzinfo
from typing import Optional


def parse_iso_date(value: str | None, tz: tzinfo | None = None) -> datetime | None:
    """Return a datetime for an ISO 8601 string, or ``None``.

    Parameters
    ----------
    value:
        ``YYYY-MM-DD`` or ``YYYY-MM-DDTHH:MM[:SS][offset]``. Unparseable
        values return ``None``; the model does not always follow the format.
    tz:
        Timezone attached to naive values. When omitted naive values stay
        naive and are read as local time.
    """
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if dt.tzinfo is None and tz is not None:
        dt = dt.replace(tzinfo=tz)
    return dt


def make_event_id(index: int, token: Optional[int]) -> str:
    """Create an identifier unique within one parse call."""
    return f"evt-{index}-{token}"
