"""Client-side time windows for the event list."""
from __future__ import annotations

import enum
from datetime import datetime, timedelta
from typing import List

from ingest.schemas import EventRecord
from scrapers.utils import parse_iso_date


class TimeWindow(str, enum.Enum):
    ALL = "all"
    NOW = "now"  # today and tomorrow
    WEEK = "week"
    MONTH = "month"


def _event_time(event: EventRecord, now: datetime) -> datetime | None:
    dt = parse_iso_date(event.iso_date, now.tzinfo)
    if dt is None:
        return None
    if now.tzinfo is not None:
        return dt.astimezone(now.tzinfo)
    # Naive ``now``: compare on local wall-clock time.
    return dt.astimezone().replace(tzinfo=None) if dt.tzinfo else dt


def _sort_key(event: EventRecord) -> float:
    dt = parse_iso_date(event.iso_date)
    if dt is None:
        return 0.0
    try:
        return dt.timestamp()
    except (OverflowError, OSError, ValueError):
        return 0.0


def in_window(event: EventRecord, window: TimeWindow, now: datetime) -> bool:
    """Whether ``event`` belongs to ``window``.

    Events without a usable ISO date are always kept.
    """
    if window is TimeWindow.ALL:
        return True
    event_time = _event_time(event, now)
    if event_time is None:
        return True

    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window is TimeWindow.NOW:
        return today_start <= event_time < today_start + timedelta(days=2)
    if window is TimeWindow.WEEK:
        return today_start <= event_time < today_start + timedelta(days=7)
    if window is TimeWindow.MONTH:
        return event_time.year == now.year and event_time.month == now.month
    return True


def filter_events(events: List[EventRecord], window: TimeWindow, now: datetime) -> List[EventRecord]:
    """Apply ``window`` and sort the survivors by date, undated first.

    ``ALL`` returns the list untouched, in the order the model gave it.
    """
    if window is TimeWindow.ALL:
        return list(events)
    kept = [event for event in events if in_window(event, window, now)]
    return sorted(kept, key=_sort_key)
