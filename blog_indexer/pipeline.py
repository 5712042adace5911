"""Run coordinator wiring discovery, extraction, dedup and indexing together."""

from __future__ import annotations

import time
from typing import Any, Callable, Sequence

import httpx
import structlog

from .config import AppConfig
from .discovery import SOURCE_TYPES, DiscoverySource, discover_links
from .engine import (
    BatchExtractor,
    ConcurrencyLimiter,
    DedupEngine,
    Indexer,
    Rejection,
    ResourcePool,
)
from .engine.batching import Extractor, Progress
from .extraction import BrowserResource, PlaywrightExtractor
from .logging_conf import configure_logging, source_logger
from .models import CandidateLink, RunSummary
from .store import MongoSearchStore, SearchStore, TypesenseStore


class IngestionPipeline:
    """Drive one discover → extract → dedup → index run."""

    def __init__(
        self,
        config: AppConfig,
        store: SearchStore,
        extractor: Extractor,
        resource_factory: Callable[[], Any],
        sources: Sequence[DiscoverySource] = (),
        client_factory: Callable[[], httpx.Client] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.extractor = extractor
        self.resource_factory = resource_factory
        self.sources = list(sources)
        self.client_factory = client_factory or (lambda: httpx.Client(follow_redirects=True))
        self.sleep = sleep
        self.logger = logger or structlog.get_logger("blog_indexer.pipeline")
        self.dedup = DedupEngine(config.dedup)
        self.indexer = Indexer(store, config.indexing, sleep=sleep)

    def discover(self) -> list[CandidateLink]:
        with self.client_factory() as client:
            return discover_links(self.sources, client, logger=self.logger)

    def run(
        self, links: Sequence[CandidateLink] | None = None, progress: Progress | None = None
    ) -> RunSummary:
        started = time.monotonic()
        if links is None:
            links = self.discover()
        links = list(links)
        if not links:
            self.logger.info("run_no_links")
            return RunSummary()

        self.logger.info("run_started", links=len(links))
        snapshot = self.dedup.load_snapshot(
            self.store, per_page=self.config.indexing.snapshot_page_size
        )
        extraction = self.config.extraction
        pool: ResourcePool[Any] = ResourcePool(self.resource_factory)
        limiter = ConcurrencyLimiter(extraction.parallel_limit)
        try:
            pool.initialize(extraction.pool_size)
            report = BatchExtractor(
                extraction,
                limiter,
                pool,
                self.extractor,
                sleep=self.sleep,
                progress=progress,
            ).run(links)
            self.logger.info("extraction_report", **report.statistics())
            filtered = self.dedup.filter(report.results, snapshot)
            indexed = self.indexer.index(filtered.accepted)
        finally:
            limiter.shutdown()
            pool.shutdown_all()

        summary = RunSummary(
            success=indexed.success,
            failed=len(report.failed) + indexed.failed,
            duplicates=len(filtered.duplicates),
            low_quality=len(report.skipped) + len(filtered.low_quality),
            total_processed=len(links),
            processing_time_ms=int((time.monotonic() - started) * 1000),
        )
        self.logger.info("run_complete", **summary.as_dict())
        return summary


def build_store(config: AppConfig) -> SearchStore:
    if config.store.backend == "mongodb":
        return MongoSearchStore(config.store)
    return TypesenseStore(config.store)


def build_sources(config: AppConfig) -> list[DiscoverySource]:
    return [
        SOURCE_TYPES[name](config.discovery, logger=source_logger(name))
        for name in config.discovery.sources
    ]


def build_pipeline(config: AppConfig, store: SearchStore | None = None) -> IngestionPipeline:
    """Wire the production collaborators for ``config``."""

    logger = configure_logging().bind(component="pipeline")
    extraction = config.extraction
    return IngestionPipeline(
        config,
        store or build_store(config),
        PlaywrightExtractor(timeout_ms=extraction.extraction_timeout),
        lambda: BrowserResource(extraction),
        sources=build_sources(config),
        logger=logger,
    )


def audit_duplicates(store: SearchStore, config: AppConfig) -> list[Rejection]:
    """Scan the whole stored index for exact duplicates."""

    records = store.iter_documents(
        fields=("title",), per_page=config.indexing.snapshot_page_size
    )
    return DedupEngine(config.dedup).find_duplicates(records)


__all__ = [
    "IngestionPipeline",
    "audit_duplicates",
    "build_pipeline",
    "build_sources",
    "build_store",
]
