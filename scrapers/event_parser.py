"""Turn a free-text model completion into ``EventRecord`` objects.

The model is asked to emit one block per event::

    ||EVENT_START||
    TITLE: Storytime on the Lawn
    DATE_DISPLAY: Saturday, Oct 14 at 10:00 AM
    ISO_DATE: 2023-10-14T10:00:00
    LOCATION: Belmont Public Library
    DESCRIPTION: Stories and songs for preschoolers.
    TAGS: Storytime, Outdoors, Free
    SOURCE_TYPE: Library
    SOURCE_URL: https://www.belmontpubliclibrary.net/events
    ||EVENT_END||

Anything before the first start marker is preamble and anything after an end
marker inside a block is ignored. Blocks that lack a title or a date are
dropped one by one; the rest of the document still parses.
"""
from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from ingest.schemas import (
    DEFAULT_DESCRIPTION,
    DEFAULT_SOURCE_TYPE,
    DEFAULT_TAGS,
    EventRecord,
)
from .utils import make_event_id

logger = logging.getLogger(__name__)

EVENT_START = "||EVENT_START||"
EVENT_END = "||EVENT_END||"

DEFAULT_LOCATION = "Belmont, MA"

FIELD_LABELS = (
    "TITLE",
    "DATE_DISPLAY",
    "ISO_DATE",
    "LOCATION",
    "DESCRIPTION",
    "TAGS",
    "SOURCE_TYPE",
    "SOURCE_URL",
)
# Older prompts asked for a plain DATE line.
LEGACY_DATE_LABEL = "DATE"

_KNOWN_LABELS = frozenset(FIELD_LABELS + (LEGACY_DATE_LABEL,))


def split_segments(text: str) -> List[str]:
    """Return the body of every event block in ``text``."""
    if not text:
        return []
    blocks = text.split(EVENT_START)[1:]
    return [block.split(EVENT_END, 1)[0] for block in blocks]


def extract_fields(segment: str) -> Dict[str, str]:
    """Scan ``segment`` line by line for ``LABEL: value`` pairs.

    Only the first line carrying a label counts. If that line has an empty
    value the label is treated as missing; later lines do not fill it in.
    """
    fields: Dict[str, str] = {}
    seen: set[str] = set()
    for line in segment.splitlines():
        label, sep, value = line.strip().partition(":")
        if not sep or label not in _KNOWN_LABELS or label in seen:
            continue
        seen.add(label)
        value = value.strip()
        if value:
            fields[label] = value
    return fields


def split_tags(raw: str) -> List[str]:
    """Split a comma separated tag line, trimming each piece.

    Empty pieces from doubled or trailing commas are kept.
    """
    return [tag.strip() for tag in raw.split(",")]


def build_event(
    fields: Dict[str, str],
    event_id: str,
    fallback_location: str = DEFAULT_LOCATION,
) -> Optional[EventRecord]:
    """Build an ``EventRecord`` from extracted fields, or ``None`` if unusable."""
    title = fields.get("TITLE")
    display_date = fields.get("DATE_DISPLAY") or fields.get(LEGACY_DATE_LABEL)
    if not title or not display_date:
        return None

    tags = split_tags(fields["TAGS"]) if "TAGS" in fields else list(DEFAULT_TAGS)
    return EventRecord(
        id=event_id,
        title=title,
        display_date=display_date,
        iso_date=fields.get("ISO_DATE"),
        location=fields.get("LOCATION", fallback_location),
        description=fields.get("DESCRIPTION", DEFAULT_DESCRIPTION),
        tags=tags,
        source_type=fields.get("SOURCE_TYPE", DEFAULT_SOURCE_TYPE),
        source_url=fields.get("SOURCE_URL"),
    )


def parse_events(
    text: str,
    *,
    fallback_location: str = DEFAULT_LOCATION,
    token: Optional[int] = None,
) -> List[EventRecord]:
    """Parse every event block in ``text``.

    Parameters
    ----------
    text:
        Raw model completion. Empty or marker-free text yields ``[]``.
    fallback_location:
        Location used when a block has no ``LOCATION`` line.
    token:
        Fetch-time token mixed into the generated ids. Defaults to the
        current time in milliseconds.
    """
    if token is None:
        token = int(time.time() * 1000)

    events: List[EventRecord] = []
    for index, segment in enumerate(split_segments(text)):
        fields = extract_fields(segment)
        event = build_event(fields, make_event_id(index, token), fallback_location)
        if event is None:
            logger.debug("Dropping event block %d: missing title or date", index)
            continue
        events.append(event)
    return events
