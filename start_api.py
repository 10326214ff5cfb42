#!/usr/bin/env python3
"""
Startup script for the Belmont Buzz API server.

Usage:
    python start_api.py                       # Development mode
    python start_api.py --prod                # Production mode
    python start_api.py --town "Lexington, MA" --cache-dir /var/cache/buzz
"""

import argparse
import os
import uvicorn


def main():
    """Start the FastAPI server with configurable options."""
    os.environ.setdefault("WATCHFILES_FORCE_POLLING", "1")
    parser = argparse.ArgumentParser(description="Start the Belmont Buzz API")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8001, help="Port to bind to (default: 8001)")
    parser.add_argument("--prod", action="store_true", help="Run in production mode (no auto-reload)")
    parser.add_argument("--town", help="Town to scout (overrides BUZZ_TOWN)")
    parser.add_argument("--cache-dir", help="Directory for the weekly event cache (overrides BUZZ_CACHE_DIR)")
    parser.add_argument("--timezone", help="IANA zone for the Sunday refresh cutoff (overrides BUZZ_TIMEZONE)")

    args = parser.parse_args()

    # Settings are read from the environment inside the server process.
    if args.town:
        os.environ["BUZZ_TOWN"] = args.town
    if args.cache_dir:
        os.environ["BUZZ_CACHE_DIR"] = args.cache_dir
    if args.timezone:
        os.environ["BUZZ_TIMEZONE"] = args.timezone

    if args.prod:
        # One worker: the cache is a single local slot with one writer.
        print(f"🚀 Starting Belmont Buzz API in PRODUCTION mode")
        print(f"   📍 http://{args.host}:{args.port}")
        uvicorn.run(
            "api.main:app",
            host=args.host,
            port=args.port,
            workers=1,
            log_level="info",
        )
    else:
        print(f"🔧 Starting Belmont Buzz API in DEVELOPMENT mode")
        print(f"   📍 http://{args.host}:{args.port}")
        print(f"   📚 API docs: http://{args.host}:{args.port}/docs")
        uvicorn.run(
            "api.main:app",
            host=args.host,
            port=args.port,
            log_level="debug",
            reload=True,
            reload_dirs=["api", "ingest", "scrapers"],
        )


if __name__ == "__main__":
    main()
