"""Tests for the events API."""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
from datetime import datetime, timezone
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from api.main import app, get_loader
from ingest.schemas import EventRecord, GroundingSource, LoadError, LoadResult
from ingest.settings import Settings

client = TestClient(app)


@pytest.fixture
def mock_result():
    """A live load with one ticketed and one community event."""
    return LoadResult(
        events=[
            EventRecord(
                id="evt-0-1",
                title="Kids Rock Concert",
                display_date="Saturday, Oct 21 at 2:00 PM",
                iso_date="2023-10-21T14:00:00",
                location="Regent Theatre",
                description="A rock show for little ears.",
                tags=["Music", "Paid"],
                source_type="Ticketmaster",
                source_url="https://example.com/kids-rock",
            ),
            EventRecord(
                id="evt-1-1",
                title="Storytime",
                display_date="Every Wednesday",
                location="Belmont Public Library",
            ),
        ],
        sources=[GroundingSource(uri="https://example.com", title="Example")],
        from_cache=False,
        last_updated=datetime(2023, 10, 17, 16, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def loader(mock_result):
    mock = Mock()
    mock.settings = Settings(timezone="America/New_York")
    mock.load_events.return_value = mock_result
    app.dependency_overrides[get_loader] = lambda: mock
    yield mock
    app.dependency_overrides.clear()


def test_health_endpoint():
    """Test the health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data


def test_root_endpoint():
    """Test the root endpoint returns API info."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "Belmont Buzz" in data["name"]
    assert data["events"] == "/events"


def test_get_events(loader):
    response = client.get("/events")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["from_cache"] is False
    assert data["window"] == "all"
    assert data["total_found"] == 2
    assert [e["title"] for e in data["events"]] == ["Kids Rock Concert", "Storytime"]
    assert data["events"][0]["ticketed"] is True
    assert data["events"][1]["ticketed"] is False
    assert data["events"][1]["tags"] == ["Family"]
    assert data["sources"] == [{"uri": "https://example.com", "title": "Example"}]
    assert data["last_updated"] == "2023-10-17T16:00:00+00:00"
    loader.load_events.assert_called_once_with(False)


def test_get_events_force_refresh(loader):
    client.get("/events", params={"force_refresh": "true"})
    loader.load_events.assert_called_once_with(True)


def test_refresh_endpoint_forces_query(loader):
    response = client.post("/events/refresh")
    assert response.status_code == 200
    loader.load_events.assert_called_once_with(True)


def test_cached_result_with_notice(loader, mock_result):
    mock_result.from_cache = True
    mock_result.notice = "Showing previously saved events."
    data = client.get("/events").json()
    assert data["from_cache"] is True
    assert data["notice"] == "Showing previously saved events."


def test_error_state_is_503(loader):
    loader.load_events.return_value = LoadError("Unable to load events right now.")
    response = client.get("/events")
    assert response.status_code == 503
    assert response.json()["detail"] == "Unable to load events right now."


def test_invalid_window(loader):
    response = client.get("/events", params={"window": "year"})
    assert response.status_code == 422  # Validation error
