"""FastAPI application for the Belmont Buzz event scout."""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel

from api.filters import TimeWindow, filter_events
from ingest.freshness import local_now
from ingest.loader import EventLoader, build_loader
from ingest.schemas import EventRecord, GroundingSource, LoadError

VERSION = "1.0.0"

app = FastAPI(
    title="Belmont Buzz API",
    description="Web-grounded family event listings with a weekly cache",
    version=VERSION,
)

# Thread pool for running the blocking loader in async context
executor = ThreadPoolExecutor(max_workers=4)


class EventModel(BaseModel):
    """Event card data."""
    id: str
    title: str
    display_date: str
    iso_date: Optional[str] = None
    location: str
    description: str
    tags: List[str]
    source_type: Optional[str] = None
    source_url: Optional[str] = None
    ticketed: bool = False

    @classmethod
    def from_record(cls, event: EventRecord) -> "EventModel":
        return cls(**event.to_dict(), ticketed=event.ticketed)


class SourceModel(BaseModel):
    """Grounding source shown under the event grid."""
    uri: str
    title: str

    @classmethod
    def from_source(cls, source: GroundingSource) -> "SourceModel":
        return cls(uri=source.uri, title=source.title)


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    version: str


class EventsResponse(BaseModel):
    """Response model for an event load."""
    success: bool
    events: List[EventModel]
    sources: List[SourceModel]
    from_cache: bool
    last_updated: str  # ISO datetime string
    notice: Optional[str] = None
    window: TimeWindow
    total_found: int


@lru_cache(maxsize=1)
def get_loader() -> EventLoader:
    """Shared loader; tests swap it via ``app.dependency_overrides``."""
    return build_loader()


async def _load(loader: EventLoader, force_refresh: bool, window: TimeWindow) -> EventsResponse:
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(executor, loader.load_events, force_refresh)

    if isinstance(result, LoadError):
        raise HTTPException(status_code=503, detail=result.message)

    visible = filter_events(result.events, window, local_now(loader.settings.tzinfo))
    return EventsResponse(
        success=True,
        events=[EventModel.from_record(e) for e in visible],
        sources=[SourceModel.from_source(s) for s in result.sources],
        from_cache=result.from_cache,
        last_updated=result.last_updated.isoformat(),
        notice=result.notice,
        window=window,
        total_found=len(result.events),
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=VERSION
    )


@app.get("/live", response_model=HealthResponse)
async def liveness_check():
    """Liveness check endpoint for container orchestration."""
    return HealthResponse(
        status="alive",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=VERSION
    )


@app.get("/ready", response_model=HealthResponse)
async def readiness_check():
    """Readiness check endpoint for container orchestration."""
    return HealthResponse(
        status="ready",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=VERSION
    )


@app.get("/events", response_model=EventsResponse)
async def get_events(
    window: TimeWindow = Query(TimeWindow.ALL),
    force_refresh: bool = Query(False),
    loader: EventLoader = Depends(get_loader),
):
    """
    Return this week's events.

    Serves the weekly cache when it is fresh, otherwise asks the model.
    If the model is unreachable the last saved events are returned with a
    notice; with nothing saved the endpoint answers 503.
    """
    return await _load(loader, force_refresh, window)


@app.post("/events/refresh", response_model=EventsResponse)
async def refresh_events(
    window: TimeWindow = Query(TimeWindow.ALL),
    loader: EventLoader = Depends(get_loader),
):
    """Force a live query regardless of cache freshness."""
    return await _load(loader, True, window)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Belmont Buzz API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "events": "/events"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
