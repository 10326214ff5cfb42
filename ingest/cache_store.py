"""Single-slot cache for the last successful event fetch.

The store holds one JSON record under one fixed key::

    {"timestamp": 1697284800000, "events": [...], "sources": [...]}

The key carries a format version so a layout change never reads an old
record. Storage itself is a small key-value backend: an in-memory dict for
tests and a directory of JSON files in production.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from .schemas import CacheEntry

logger = logging.getLogger(__name__)

CACHE_KEY = "buzz_events_cache_v1"


class StorageBackend(Protocol):
    """Minimal key-value storage used by :class:`CacheStore`."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryBackend:
    """Dict-backed storage."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class FileBackend:
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        """Replace the stored value atomically."""
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise


class CacheStore:
    """Read and replace the cached :class:`CacheEntry`."""

    def __init__(self, backend: StorageBackend, key: str = CACHE_KEY):
        self.backend = backend
        self.key = key

    def read(self) -> Optional[CacheEntry]:
        """Return the cached entry, or ``None`` if missing or unreadable."""
        try:
            raw = self.backend.get(self.key)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read event cache %s: %s", self.key, exc)
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
            return CacheEntry.from_dict(data)
        except (ValueError, KeyError, TypeError, OverflowError) as exc:
            logger.warning("Ignoring corrupt event cache %s: %s", self.key, exc)
            return None

    def write(self, entry: CacheEntry) -> None:
        """Replace the whole cached entry."""
        payload = json.dumps(entry.to_dict(), ensure_ascii=False)
        self.backend.set(self.key, payload)
        logger.info(
            "Cached %d event(s) and %d source(s)", len(entry.events), len(entry.sources)
        )
