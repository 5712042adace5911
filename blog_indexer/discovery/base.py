"""Discovery source contract and shared URL filtering."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

import httpx
import structlog

from ..config import DiscoveryConfig
from ..models import CandidateLink


class DiscoveryError(RuntimeError):
    """Raised when no discovery source produced a result."""


def is_blog_url(
    url: str, exclude_domains: Iterable[str] = (), exclude_extensions: Iterable[str] = ()
) -> bool:
    if not url:
        return False
    lowered = url.lower()
    if any(domain in lowered for domain in exclude_domains):
        return False
    if any(lowered.endswith(ext) for ext in exclude_extensions):
        return False
    return True


class DiscoverySource(ABC):
    """A feed of candidate links."""

    name: str = "unknown"

    def __init__(
        self,
        config: DiscoveryConfig | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config or DiscoveryConfig()
        self.logger = logger or structlog.get_logger(f"blog_indexer.source.{self.name}")

    @abstractmethod
    def discover(self, client: httpx.Client) -> list[CandidateLink]:
        """Return the links currently listed by this source."""

    def accept(self, url: str) -> bool:
        return is_blog_url(url, self.config.exclude_domains, self.config.exclude_extensions)

    def filter_links(self, links: Sequence[CandidateLink]) -> list[CandidateLink]:
        kept = [link for link in links if self.accept(link.url)]
        self.logger.info("source_links_filtered", found=len(links), kept=len(kept))
        return kept

    def _get(self, client: httpx.Client, url: str, **kwargs) -> httpx.Response:
        response = client.get(
            url,
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.request_timeout,
            **kwargs,
        )
        response.raise_for_status()
        return response


__all__ = ["DiscoveryError", "DiscoverySource", "is_blog_url"]
