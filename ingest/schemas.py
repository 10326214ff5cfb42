"""Shared data models for the event scout."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

DEFAULT_DESCRIPTION = "No description available."
DEFAULT_TAGS = ("Family",)
DEFAULT_SOURCE_TYPE = "Local"


@dataclass
class EventRecord:
    """A single parsed event as shown on an event card."""

    id: str
    title: str
    display_date: str
    location: str
    description: str = DEFAULT_DESCRIPTION
    tags: List[str] = field(default_factory=lambda: list(DEFAULT_TAGS))
    iso_date: Optional[str] = None
    source_type: Optional[str] = DEFAULT_SOURCE_TYPE
    source_url: Optional[str] = None

    @property
    def ticketed(self) -> bool:
        """True for paid or ticket-platform events."""
        kind = (self.source_type or "").lower()
        if "ticket" in kind or "eventbrite" in kind:
            return True
        return any("paid" in tag.lower() for tag in self.tags)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventRecord":
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            display_date=str(data["display_date"]),
            location=str(data["location"]),
            description=str(data.get("description", DEFAULT_DESCRIPTION)),
            tags=[str(t) for t in data.get("tags", DEFAULT_TAGS)],
            iso_date=data.get("iso_date"),
            source_type=data.get("source_type"),
            source_url=data.get("source_url"),
        )


@dataclass(frozen=True)
class GroundingSource:
    """A web page the model cited while answering."""

    uri: str
    title: str

    def to_dict(self) -> dict[str, str]:
        return {"uri": self.uri, "title": self.title}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GroundingSource":
        return cls(uri=str(data["uri"]), title=str(data["title"]))


@dataclass(frozen=True)
class RawCitation:
    """Citation as returned by the query client; either field may be missing."""

    uri: Optional[str] = None
    title: Optional[str] = None


@dataclass
class CacheEntry:
    """The last successful fetch, stamped in epoch milliseconds."""

    timestamp: int
    events: List[EventRecord] = field(default_factory=list)
    sources: List[GroundingSource] = field(default_factory=list)

    @property
    def updated_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "events": [e.to_dict() for e in self.events],
            "sources": [s.to_dict() for s in self.sources],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        timestamp = data["timestamp"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError(f"Invalid cache timestamp: {timestamp!r}")
        if not math.isfinite(timestamp):
            raise ValueError(f"Invalid cache timestamp: {timestamp!r}")
        try:
            datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"Cache timestamp out of range: {timestamp!r}") from exc
        return cls(
            timestamp=int(timestamp),
            events=[EventRecord.from_dict(e) for e in data["events"]],
            sources=[GroundingSource.from_dict(s) for s in data["sources"]],
        )


@dataclass
class LoadResult:
    """Successful load: data plus where it came from."""

    events: List[EventRecord]
    sources: List[GroundingSource]
    from_cache: bool
    last_updated: datetime
    notice: Optional[str] = None


@dataclass
class LoadError:
    """Error state: nothing live and nothing cached to show."""

    message: str
