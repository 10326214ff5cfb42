"""Weekly cache freshness policy.

Cached events belong to a weekly window that starts every Sunday at 06:00
local time. Anything stored before the start of the current window is
stale. The check is made when a load is requested, so no timer is needed.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

REFRESH_WEEKDAY = 6  # Sunday, as numbered by ``date.weekday()``
REFRESH_TIME = time(6, 0)


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    """Current time in ``tz``, or in the system zone when ``tz`` is None."""
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


def refresh_cutoff(now: datetime) -> datetime:
    """Return the start of the refresh window containing ``now``.

    This is the most recent Sunday 06:00 at or before ``now``. Early on a
    Sunday morning the window has not rolled over yet, so the previous
    Sunday is returned.
    """
    days_back = (now.weekday() - REFRESH_WEEKDAY) % 7
    sunday: date = now.date() - timedelta(days=days_back)
    cutoff = datetime.combine(sunday, REFRESH_TIME, tzinfo=now.tzinfo)
    if cutoff > now:
        cutoff = datetime.combine(sunday - timedelta(days=7), REFRESH_TIME, tzinfo=now.tzinfo)
    return cutoff


def to_millis(moment: datetime) -> int:
    """Epoch milliseconds; naive datetimes are read as system local time."""
    return int(moment.timestamp() * 1000)


def is_fresh(timestamp_ms: int, now: datetime) -> bool:
    """True if a cache entry stamped ``timestamp_ms`` is inside this window."""
    return timestamp_ms > to_millis(refresh_cutoff(now))
