"""Run every discovery source concurrently and merge their links."""

from __future__ import annotations

from typing import Sequence

import httpx
import structlog

from ..engine.fanout import gather_settled
from ..models import CandidateLink
from .base import DiscoveryError, DiscoverySource


def discover_links(
    sources: Sequence[DiscoverySource],
    client: httpx.Client,
    logger: structlog.BoundLogger | None = None,
) -> list[CandidateLink]:
    """Merge links from all sources, dropping repeated URLs.

    A failing source is logged and skipped. ``DiscoveryError`` is raised only
    when every source failed.
    """

    logger = logger or structlog.get_logger("blog_indexer.discovery")
    if not sources:
        logger.info("discovery_no_sources")
        return []
    calls = {source.name: (lambda src=source: src.discover(client)) for source in sources}
    settled = gather_settled(calls)

    merged: list[CandidateLink] = []
    seen: set[str] = set()
    failures = 0
    for item in settled:
        if not item.ok:
            failures += 1
            logger.error("source_failed", source=item.name, error=str(item.error))
            continue
        links = item.value or []
        logger.info("source_discovered", source=item.name, links=len(links))
        for link in links:
            if link.url in seen:
                continue
            seen.add(link.url)
            merged.append(link)

    if failures == len(settled):
        raise DiscoveryError("All discovery sources failed")
    logger.info("discovery_complete", links=len(merged), failed_sources=failures)
    return merged


__all__ = ["discover_links"]
