"""Headless Chromium resources for the extraction pool."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

import structlog
from playwright.sync_api import sync_playwright

from ..config import ExtractionConfig

LAUNCH_ARGS = [
    "--ignore-certificate-errors",
    "--disable-dev-shm-usage",
]


@dataclass(slots=True)
class RenderedPage:
    url: str
    status_code: int
    html: str


class BrowserResource:
    """One Chromium instance bound to its own worker thread.

    Playwright's sync objects may only be used from the thread that created
    them, so every call is marshalled onto a private single-thread executor.
    A launch failure propagates out of the constructor.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.logger = logger or structlog.get_logger("blog_indexer.browser")
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="browser")
        self._playwright: Any = None
        self._browser: Any = None
        try:
            self._executor.submit(self._start).result()
        except Exception:
            self._executor.submit(self._stop).result()
            self._executor.shutdown(wait=True)
            raise

    def _start(self) -> None:
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(
            headless=self.config.headless, args=LAUNCH_ARGS
        )
        self.logger.debug("browser_started", headless=self.config.headless)

    def render(self, url: str, timeout_ms: int | None = None) -> RenderedPage:
        timeout = timeout_ms or self.config.extraction_timeout
        return self._executor.submit(self._render, url, timeout).result()

    def _render(self, url: str, timeout_ms: int) -> RenderedPage:
        width, height = self.config.viewport_size
        context = self._browser.new_context(
            user_agent=self.config.user_agent,
            viewport={"width": width, "height": height},
            ignore_https_errors=True,
        )
        try:
            page = context.new_page()
            blocked = set(self.config.blocked_resource_types)
            if blocked:
                page.route(
                    "**/*",
                    lambda route: route.abort()
                    if route.request.resource_type in blocked
                    else route.continue_(),
                )
            response = page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
            html = page.content()
            status = response.status if response is not None else 200
            return RenderedPage(url=page.url, status_code=status, html=html)
        finally:
            context.close()

    def _stop(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def close(self) -> None:
        try:
            self._executor.submit(self._stop).result()
        finally:
            self._executor.shutdown(wait=True)
        self.logger.debug("browser_closed")


__all__ = ["BrowserResource", "RenderedPage"]
