"""Load this week's events and print them, locally or through the API."""
from __future__ import annotations

import argparse
import os
import logging

import requests

from ingest.api_client import get_events, request_refresh
from ingest.loader import build_loader
from ingest.schemas import LoadError

logger = logging.getLogger(__name__)
if os.getenv("BUZZ_DEBUG"):
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def run_local(force: bool) -> int:
    """Run the loader in-process against the file cache."""
    loader = build_loader()
    result = loader.load_events(force_refresh=force)

    if isinstance(result, LoadError):
        print("❌", result.message)
        return 1

    origin = "cache" if result.from_cache else "live query"
    print(f"Loaded {len(result.events)} event(s) from {origin} "
          f"(updated {result.last_updated.isoformat()})")
    if result.notice:
        print("⚠️ ", result.notice)
    if not result.events:
        print("No events found this week.")
    for event in result.events:
        print(f"  • {event.display_date} | {event.title} @ {event.location}")
    for source in result.sources:
        logger.info("  source: %s <%s>", source.title, source.uri)
    return 0


def run_remote(force: bool, window: str) -> int:
    """Ask a running API for events, optionally forcing a refresh."""
    try:
        data = request_refresh(window) if force else get_events(window)
    except requests.RequestException as exc:
        print("❌ API request failed:", exc)
        return 1

    print(f"Loaded {len(data['events'])} event(s) "
          f"({'cache' if data['from_cache'] else 'live query'})")
    if data.get("notice"):
        print("⚠️ ", data["notice"])
    for event in data["events"]:
        print(f"  • {event['display_date']} | {event['title']} @ {event['location']}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Load Belmont Buzz events")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Ignore a fresh cache and query the model",
    )
    parser.add_argument(
        "--remote",
        action="store_true",
        help="Go through a running API (API_URL) instead of loading in-process",
    )
    parser.add_argument(
        "--window",
        choices=["all", "now", "week", "month"],
        default="all",
        help="Time window applied by the API (remote mode only)",
    )
    args = parser.parse_args(argv)

    if args.remote:
        return run_remote(args.force, args.window)
    return run_local(args.force)


if __name__ == "__main__":
    raise SystemExit(main())
