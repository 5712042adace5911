"""Batch orchestrator driving candidate links through the limiter and pool."""

from __future__ import annotations

import time
from concurrent.futures import Future, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Protocol, Sequence, TypeVar

import structlog

from ..config import ExtractionConfig
from ..models import CandidateDocument, CandidateLink, ExtractedContent
from .limiter import ConcurrencyLimiter
from .resource_pool import ResourcePool

T = TypeVar("T")


class Extractor(Protocol):
    def extract(self, url: str, resource: Any) -> ExtractedContent: ...


class Progress(Protocol):
    def start(self, total: int) -> None: ...

    def set_label(self, label: str) -> None: ...

    def advance(
        self,
        success: bool = False,
        failed: bool = False,
        skipped: bool = False,
        current_url: str | None = None,
    ) -> None: ...

    def close(self) -> None: ...


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    if size < 1:
        raise ValueError("Batch size must be >= 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]


@dataclass(slots=True)
class FailedLink:
    url: str
    reason: str
    error: str | None = None


@dataclass(slots=True)
class LinkOutcome:
    status: str  # "extracted" | "skipped" | "failed"
    link: CandidateLink
    document: CandidateDocument | None = None
    reason: str | None = None
    error: str | None = None
    attempts: int = 0


@dataclass(slots=True)
class BatchStats:
    index: int
    size: int
    extracted: int = 0
    skipped: int = 0
    failed: int = 0


@dataclass
class ExtractionReport:
    results: list[CandidateDocument] = field(default_factory=list)
    skipped: list[FailedLink] = field(default_factory=list)
    failed: list[FailedLink] = field(default_factory=list)
    batches: list[BatchStats] = field(default_factory=list)
    elapsed_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.results) + len(self.skipped) + len(self.failed)

    def statistics(self) -> dict[str, float]:
        extracted = len(self.results)
        total_words = sum(doc.word_count for doc in self.results)
        return {
            "extracted": extracted,
            "skipped": len(self.skipped),
            "failed": len(self.failed),
            "total_words": total_words,
            "average_words": round(total_words / extracted, 1) if extracted else 0.0,
            "total_reading_time": sum(doc.reading_time for doc in self.results),
            "average_ms_per_document": round(self.elapsed_ms / extracted, 1) if extracted else 0.0,
        }


class BatchExtractor:
    """Extract candidate links batch by batch with bounded parallelism."""

    def __init__(
        self,
        config: ExtractionConfig,
        limiter: ConcurrencyLimiter,
        pool: ResourcePool,
        extractor: Extractor,
        sleep: Callable[[float], None] = time.sleep,
        progress: Progress | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.limiter = limiter
        self.pool = pool
        self.extractor = extractor
        self.sleep = sleep
        self.progress = progress
        self.logger = logger or structlog.get_logger("blog_indexer.batching")

    def run(self, links: Sequence[CandidateLink]) -> ExtractionReport:
        report = ExtractionReport()
        if not links:
            return report
        started = time.monotonic()
        batches = list(chunked(list(links), self.config.batch_size))
        self.logger.info(
            "extraction_started",
            links=len(links),
            batches=len(batches),
            parallel_limit=self.config.parallel_limit,
            pool_size=self.pool.size,
        )
        if self.progress is not None:
            self.progress.start(len(links))
        try:
            for index, batch in enumerate(batches, start=1):
                if self.progress is not None:
                    self.progress.set_label(f"batch {index}/{len(batches)}")
                stats = self._run_batch(index, batch, report)
                report.batches.append(stats)
                self.logger.info(
                    "batch_complete",
                    batch=index,
                    batches=len(batches),
                    extracted=stats.extracted,
                    skipped=stats.skipped,
                    failed=stats.failed,
                    total_extracted=len(report.results),
                )
                if index < len(batches) and self.config.delay_between_batches > 0:
                    self.logger.debug("batch_cooldown", seconds=self.config.delay_between_batches)
                    self.sleep(self.config.delay_between_batches)
        finally:
            if self.progress is not None:
                self.progress.close()
        report.elapsed_ms = int((time.monotonic() - started) * 1000)
        return report

    def _run_batch(
        self, index: int, batch: Sequence[CandidateLink], report: ExtractionReport
    ) -> BatchStats:
        stats = BatchStats(index=index, size=len(batch))
        futures: dict[Future[LinkOutcome], CandidateLink] = {
            self.limiter.submit(self.process_link, link): link for link in batch
        }
        for future in as_completed(futures):
            link = futures[future]
            try:
                outcome = future.result()
            except Exception as exc:  # noqa: BLE001
                self.logger.error("extraction_task_error", url=link.url, error=str(exc))
                outcome = LinkOutcome(
                    status="failed", link=link, reason="task_error", error=str(exc)
                )
            self._record(outcome, stats, report)
        return stats

    def _record(self, outcome: LinkOutcome, stats: BatchStats, report: ExtractionReport) -> None:
        url = outcome.link.url
        if outcome.status == "extracted" and outcome.document is not None:
            stats.extracted += 1
            report.results.append(outcome.document)
        elif outcome.status == "skipped":
            stats.skipped += 1
            report.skipped.append(FailedLink(url, outcome.reason or "skipped", outcome.error))
        else:
            stats.failed += 1
            report.failed.append(FailedLink(url, outcome.reason or "failed", outcome.error))
        if self.progress is not None:
            self.progress.advance(
                success=outcome.status == "extracted",
                skipped=outcome.status == "skipped",
                failed=outcome.status == "failed",
                current_url=url,
            )

    def process_link(self, link: CandidateLink) -> LinkOutcome:
        started = time.monotonic()
        content, attempts, error = self.extract_with_retry(link.url)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        if content is None:
            return LinkOutcome(
                status="failed",
                link=link,
                reason="extraction_failed",
                error=error,
                attempts=attempts,
            )
        if not self.passes_quality_gate(content):
            self.logger.info(
                "extraction_skipped",
                url=link.url,
                reason="insufficient_content",
                word_count=content.word_count,
            )
            return LinkOutcome(
                status="skipped", link=link, reason="insufficient_content", attempts=attempts
            )
        document = CandidateDocument.from_extraction(link, content, extraction_time=elapsed_ms)
        self.logger.info(
            "extraction_succeeded",
            url=link.url,
            title=document.title,
            word_count=document.word_count,
            elapsed_ms=elapsed_ms,
        )
        return LinkOutcome(status="extracted", link=link, document=document, attempts=attempts)

    def extract_with_retry(self, url: str) -> tuple[ExtractedContent | None, int, str | None]:
        """Return ``(content, attempts, last_error)``; content is None once retries run out."""

        max_attempts = self.config.retry_attempts + 1
        last_error: str | None = None
        for attempt in range(1, max_attempts + 1):
            try:
                with self.pool.lease() as resource:
                    return self.extractor.extract(url, resource), attempt, None
            except Exception as exc:  # noqa: BLE001
                last_error = str(exc) or exc.__class__.__name__
                self.logger.warning(
                    "extraction_error",
                    url=url,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=last_error,
                )
            if attempt < max_attempts:
                delay = self.config.retry_delay * attempt
                self.logger.info("extraction_retry", url=url, attempt=attempt + 1, delay=delay)
                self.sleep(delay)
        return None, max_attempts, last_error

    def passes_quality_gate(self, content: ExtractedContent) -> bool:
        return bool(content.content) and content.word_count > self.config.min_word_count


__all__ = [
    "BatchExtractor",
    "BatchStats",
    "ExtractionReport",
    "Extractor",
    "FailedLink",
    "LinkOutcome",
    "chunked",
]
