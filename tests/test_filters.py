import os
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from api.filters import TimeWindow, filter_events
from ingest.schemas import EventRecord

TZ = ZoneInfo("America/New_York")
# Tuesday afternoon
NOW = datetime(2023, 10, 17, 15, 0, tzinfo=TZ)


def event(title, iso_date=None):
    return EventRecord(id=title, title=title, display_date="some day", location="Belmont, MA", iso_date=iso_date)


@pytest.fixture
def events():
    return [
        event("next month", "2023-11-02T10:00:00"),
        event("this morning", "2023-10-17T09:00:00"),
        event("undated"),
        event("garbled", "next Tuesday-ish"),
        event("tomorrow night", "2023-10-18T19:00:00"),
        event("saturday", "2023-10-21T10:00:00"),
        event("last week", "2023-10-10T10:00:00"),
        event("late october", "2023-10-30T10:00:00"),
    ]


def titles(items):
    return [e.title for e in items]


def test_all_keeps_original_order(events):
    assert titles(filter_events(events, TimeWindow.ALL, NOW)) == titles(events)


def test_now_is_today_and_tomorrow(events):
    assert titles(filter_events(events, TimeWindow.NOW, NOW)) == [
        "undated",
        "garbled",
        "this morning",
        "tomorrow night",
    ]


def test_week_is_next_seven_days(events):
    assert titles(filter_events(events, TimeWindow.WEEK, NOW)) == [
        "undated",
        "garbled",
        "this morning",
        "tomorrow night",
        "saturday",
    ]


def test_month_is_calendar_month(events):
    assert titles(filter_events(events, TimeWindow.MONTH, NOW)) == [
        "undated",
        "garbled",
        "last week",
        "this morning",
        "tomorrow night",
        "saturday",
        "late october",
    ]


def test_offset_dates_are_compared_in_local_time():
    # 02:00 UTC on the 19th is still the evening of the 18th in Boston.
    late = event("late", "2023-10-19T02:00:00+00:00")
    assert titles(filter_events([late], TimeWindow.NOW, NOW)) == ["late"]


def test_ticketed_flag():
    assert EventRecord(id="1", title="t", display_date="d", location="l", source_type="Ticketmaster").ticketed
    assert EventRecord(id="2", title="t", display_date="d", location="l", source_type="Eventbrite").ticketed
    assert EventRecord(id="3", title="t", display_date="d", location="l", tags=["Music", "Paid"]).ticketed
    assert not EventRecord(id="4", title="t", display_date="d", location="l", source_type="Library").ticketed
