"""Runtime configuration read from the environment (and ``.env``)."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "belmont_buzz"


@dataclass(frozen=True)
class Settings:
    """Settings for the scout, the cache and the API."""

    town: str = "Belmont, MA"
    nearby: str = "Arlington/Cambridge"
    days_ahead: int = 45
    model: str = "gpt-4.1-mini"
    cache_dir: Path = DEFAULT_CACHE_DIR
    timezone: Optional[str] = None

    @property
    def tzinfo(self) -> Optional[ZoneInfo]:
        return ZoneInfo(self.timezone) if self.timezone else None

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``BUZZ_*`` environment variables."""
        cache_dir = os.getenv("BUZZ_CACHE_DIR")
        return cls(
            town=os.getenv("BUZZ_TOWN", cls.town),
            nearby=os.getenv("BUZZ_NEARBY", cls.nearby),
            days_ahead=int(os.getenv("BUZZ_DAYS_AHEAD", cls.days_ahead)),
            model=os.getenv("BUZZ_MODEL", cls.model),
            cache_dir=Path(cache_dir).expanduser() if cache_dir else DEFAULT_CACHE_DIR,
            timezone=os.getenv("BUZZ_TIMEZONE") or None,
        )
