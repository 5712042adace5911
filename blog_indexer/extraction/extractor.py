"""Render-then-parse extractor used by the batch orchestrator."""

from __future__ import annotations

import structlog
from playwright.sync_api import Error as PlaywrightError

from ..models import ExtractedContent
from .browser import BrowserResource
from .parser import ArticleParser


class ExtractionError(RuntimeError):
    """A page could not be rendered or returned an error status."""


class PlaywrightExtractor:
    """Render ``url`` on a pooled browser and parse the article out of it."""

    def __init__(
        self,
        timeout_ms: int = 30000,
        parser: ArticleParser | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.timeout_ms = timeout_ms
        self.parser = parser or ArticleParser()
        self.logger = logger or structlog.get_logger("blog_indexer.extractor")

    def extract(self, url: str, resource: BrowserResource) -> ExtractedContent:
        try:
            page = resource.render(url, self.timeout_ms)
        except PlaywrightError as exc:
            raise ExtractionError(f"Navigation failed for {url}: {exc}") from exc
        if page.status_code >= 400:
            raise ExtractionError(f"Unexpected status {page.status_code} for {url}")
        content = self.parser.parse(page.html, page.url)
        self.logger.debug("page_parsed", url=url, words=content.word_count)
        return content


__all__ = ["ExtractionError", "PlaywrightExtractor"]
