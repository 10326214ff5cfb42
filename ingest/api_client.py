"""Client for a running Belmont Buzz API."""
from __future__ import annotations

import os
import logging
from typing import Any

import requests
from dotenv import load_dotenv

load_dotenv()

API_BASE_URL = os.getenv("API_URL", "http://localhost:8001")

logger = logging.getLogger(__name__)
if os.getenv("BUZZ_DEBUG"):
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def _make_headers() -> dict[str, str]:
    """Return headers for API requests, including the auth token if set."""
    token = os.getenv("API_TOKEN")
    headers: dict[str, str] = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _log_request(method: str, url: str, params: Any | None = None) -> None:
    """Log details about an outgoing HTTP request."""
    logger.info("%s %s", method.upper(), url)
    if params:
        logger.info("Params: %s", params)


def get_events(window: str = "all") -> dict[str, Any]:
    """Fetch the current event list, served from the weekly cache when fresh."""
    url = f"{API_BASE_URL}/events"
    params = {"window": window}
    _log_request("get", url, params)
    # Live queries with web search can take a while.
    response = requests.get(url, params=params, headers=_make_headers(), timeout=180)
    response.raise_for_status()
    return response.json()


def request_refresh(window: str = "all") -> dict[str, Any]:
    """Ask the API to re-query the model and replace its cache."""
    url = f"{API_BASE_URL}/events/refresh"
    params = {"window": window}
    _log_request("post", url, params)
    response = requests.post(url, params=params, headers=_make_headers(), timeout=180)
    response.raise_for_status()
    return response.json()
