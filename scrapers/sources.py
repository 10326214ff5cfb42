"""Clean up the citations returned alongside a grounded completion."""
from __future__ import annotations

from typing import Iterable, List

from ingest.schemas import GroundingSource, RawCitation


def collect_sources(citations: Iterable[RawCitation]) -> List[GroundingSource]:
    """Keep citations that carry both a URI and a title, in order."""
    sources: List[GroundingSource] = []
    for citation in citations:
        if citation.uri and citation.title:
            sources.append(GroundingSource(uri=citation.uri, title=citation.title))
    return sources


def dedupe_sources(sources: Iterable[GroundingSource]) -> List[GroundingSource]:
    """Drop repeated URIs; the first occurrence wins.

    URIs are compared as exact strings, so ``http://a`` and ``http://a/``
    are different sources.
    """
    seen: set[str] = set()
    unique: List[GroundingSource] = []
    for source in sources:
        if source.uri in seen:
            continue
        seen.add(source.uri)
        unique.append(source)
    return unique


def grounding_sources(citations: Iterable[RawCitation]) -> List[GroundingSource]:
    """Filter and dedupe raw citations in one step."""
    return dedupe_sources(collect_sources(citations))
