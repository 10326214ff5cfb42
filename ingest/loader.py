"""Decide between the weekly cache and a live query, then load events."""
from __future__ import annotations

import enum
import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from scrapers.event_parser import parse_events
from scrapers.event_query import (
    EventQueryClient,
    EventQueryError,
    OpenAIEventQueryClient,
    build_prompt,
)
from scrapers.sources import grounding_sources

from .cache_store import CacheStore, FileBackend
from .freshness import is_fresh, local_now, to_millis
from .schemas import CacheEntry, LoadError, LoadResult
from .settings import Settings

logger = logging.getLogger(__name__)

STALE_NOTICE = (
    "Showing previously saved events. The AI scout could not reach local sources just now."
)
ERROR_MESSAGE = (
    "Unable to load events right now. "
    "The AI scout is having trouble connecting to local sources."
)


class LoadState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class EventLoader:
    """Load events for the presentation layer.

    A fresh cache entry is served without a network call unless a refresh
    is forced. Otherwise the query client is called once; on failure the
    last cached entry is served whatever its age.
    """

    def __init__(
        self,
        client: EventQueryClient,
        cache: CacheStore,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.cache = cache
        self.settings = settings or Settings()
        self.clock = clock or (lambda: local_now(self.settings.tzinfo))
        self.state = LoadState.IDLE
        self.last_state: Optional[LoadState] = None
        self._tokens = itertools.count(1)
        self._committed_token = 0
        self._in_flight = 0
        self._lock = threading.Lock()

    def _cached_result(self, entry: CacheEntry, notice: Optional[str] = None) -> LoadResult:
        return LoadResult(
            events=entry.events,
            sources=entry.sources,
            from_cache=True,
            last_updated=entry.updated_at,
            notice=notice,
        )

    def _finish(self, outcome: Union[LoadResult, LoadError]) -> Union[LoadResult, LoadError]:
        self.last_state = LoadState.ERROR if isinstance(outcome, LoadError) else LoadState.SUCCESS
        return outcome

    def load_events(self, force_refresh: bool = False) -> Union[LoadResult, LoadError]:
        """Return events from the cache or a live query, or a ``LoadError``."""
        with self._lock:
            token = next(self._tokens)
            self._in_flight += 1
            self.state = LoadState.LOADING
        try:
            now = self.clock()

            if not force_refresh:
                entry = self.cache.read()
                if entry is not None and is_fresh(entry.timestamp, now):
                    logger.info("Serving %d cached event(s)", len(entry.events))
                    return self._finish(self._cached_result(entry))

            try:
                response = self.client.query(build_prompt(self.settings))
            except EventQueryError as exc:
                logger.error("Event query failed: %s", exc)
                entry = self.cache.read()
                if entry is None:
                    return self._finish(LoadError(ERROR_MESSAGE))
                logger.info("Falling back to cached events from %s", entry.updated_at.isoformat())
                return self._finish(self._cached_result(entry, STALE_NOTICE))

            stamp = to_millis(now)
            events = parse_events(
                response.text, fallback_location=self.settings.town, token=stamp
            )
            sources = grounding_sources(response.citations)
            entry = CacheEntry(timestamp=stamp, events=events, sources=sources)
            logger.info("Parsed %d event(s) and %d source(s)", len(events), len(sources))

            with self._lock:
                superseded = token < self._committed_token
                if not superseded:
                    try:
                        self.cache.write(entry)
                    except OSError as exc:
                        logger.error("Could not write event cache: %s", exc)
                    self._committed_token = token

            if superseded:
                logger.info("Discarding response from superseded request %d", token)
                newer = self.cache.read()
                if newer is not None:
                    return self._finish(self._cached_result(newer))

            return self._finish(
                LoadResult(
                    events=events,
                    sources=sources,
                    from_cache=False,
                    last_updated=datetime.fromtimestamp(stamp / 1000, tz=timezone.utc),
                )
            )
        finally:
            with self._lock:
                self._in_flight -= 1
                if self._in_flight == 0:
                    self.state = LoadState.IDLE


def build_loader(settings: Optional[Settings] = None) -> EventLoader:
    """Wire the production loader: OpenAI client plus file-backed cache."""
    settings = settings or Settings.from_env()
    return EventLoader(
        client=OpenAIEventQueryClient(model=settings.model),
        cache=CacheStore(FileBackend(settings.cache_dir)),
        settings=settings,
    )
