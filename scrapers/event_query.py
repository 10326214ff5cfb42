"""Ask a web-grounded OpenAI model for upcoming local events."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol

from openai import APIStatusError, OpenAI, OpenAIError

from ingest.schemas import RawCitation
from ingest.settings import Settings

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
Find upcoming family-friendly events in {town} (and immediate surroundings like {nearby}) for the next {days_ahead} days.

SOURCES TO SCAN:
1. Local: {town_name} Public Library, Town of {town_name}, {town_name} Recreation Department, {town_name} Public Schools.
2. Regional: The Boston Calendar (https://www.thebostoncalendar.com/), Community Centers.
3. Major/Paid: Ticketmaster, Eventbrite, and local theaters for family shows, kid concerts, or plays.

Provide a curated list of 10-15 events.

STRICTLY format each event using this template with explicit separators:

||EVENT_START||
TITLE: [Event Name]
DATE_DISPLAY: [Friendly date format, e.g., Saturday, Oct 14 at 10:00 AM]
ISO_DATE: [ISO 8601 format date-time, e.g., 2023-10-14T10:00:00]
LOCATION: [Specific Location]
DESCRIPTION: [A concise 1-2 sentence description suitable for parents]
TAGS: [Comma separated tags, e.g., Outdoors, Storytime, Music, Paid, Free]
SOURCE_TYPE: [e.g. Local, Ticketmaster, Eventbrite, Library, Boston Calendar, {town_name} Rec, Schools]
SOURCE_URL: [Direct URL to the event details page if available, otherwise the main organization URL]
||EVENT_END||

Do not add any markdown formatting (like bolding headers) inside the template fields. Keep it raw text. Ensure the ISO_DATE is accurate to the current year.
"""


class EventQueryError(RuntimeError):
    """The upstream model call failed (network, auth, quota or model error)."""


@dataclass
class QueryResponse:
    """Raw completion text and the citations that came with it."""

    text: str
    citations: List[RawCitation] = field(default_factory=list)


class EventQueryClient(Protocol):
    """Anything that can answer an event prompt with grounded text."""

    def query(self, prompt: str) -> QueryResponse:
        ...


def build_prompt(settings: Settings) -> str:
    """Fill the event prompt for the configured town."""
    town_name = settings.town.split(",")[0].strip()
    return PROMPT_TEMPLATE.format(
        town=settings.town,
        town_name=town_name,
        nearby=settings.nearby,
        days_ahead=settings.days_ahead,
    )


def get_openai_client() -> OpenAI:
    """Get OpenAI client with API key from environment or secret file."""
    api_key = os.getenv("OPENAI_API_KEY")

    if not api_key:
        try:
            with open(os.path.expanduser("~/.secret_keys"), "r") as f:
                for line in f:
                    if line.startswith("OPENAI_API_KEY="):
                        api_key = line.split("=", 1)[1].strip()
                        break
        except FileNotFoundError:
            pass

    if not api_key:
        raise EventQueryError("OpenAI API key not found in environment or ~/.secret_keys")

    return OpenAI(api_key=api_key)


def extract_citations(response: Any) -> List[RawCitation]:
    """Collect ``url_citation`` annotations from a Responses API result."""
    citations: List[RawCitation] = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            for annotation in getattr(content, "annotations", None) or []:
                if getattr(annotation, "type", None) != "url_citation":
                    continue
                citations.append(
                    RawCitation(
                        uri=getattr(annotation, "url", None),
                        title=getattr(annotation, "title", None),
                    )
                )
    return citations


class OpenAIEventQueryClient:
    """Event query client backed by the OpenAI Responses API with web search."""

    def __init__(self, model: str = Settings.model, client: Optional[OpenAI] = None):
        self.model = model
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def query(self, prompt: str) -> QueryResponse:
        """Send ``prompt`` once; any failure becomes :class:`EventQueryError`."""
        try:
            resp = self.client.responses.create(
                model=self.model,
                tools=[{"type": "web_search_preview"}],
                input=prompt,
            )
        except APIStatusError as exc:
            if exc.response.status_code == 429:
                raise EventQueryError(
                    "OpenAI API returned status 429: there's a good chance the account is out of money."
                ) from exc
            raise EventQueryError(f"OpenAI API returned status {exc.response.status_code}") from exc
        except OpenAIError as exc:
            raise EventQueryError(f"OpenAI request failed: {exc}") from exc

        text = resp.output_text or ""
        citations = extract_citations(resp)
        logger.info("Model returned %d chars and %d citation(s)", len(text), len(citations))
        return QueryResponse(text=text, citations=citations)
