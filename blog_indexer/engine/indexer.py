"""Batched, retrying upserts of accepted documents into the search store."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

import structlog

from ..config import IndexingConfig
from ..models import CandidateDocument, IndexedDocument
from ..store.base import SearchStore, StoreError, UpsertOutcome
from .batching import chunked


@dataclass
class IndexingResult:
    success: int = 0
    failed: int = 0
    failures: list[UpsertOutcome] = field(default_factory=list)

    def merge(self, other: "IndexingResult") -> None:
        self.success += other.success
        self.failed += other.failed
        self.failures.extend(other.failures)


class Indexer:
    """Write documents batch by batch, retrying only what failed.

    Each batch keeps a ledger of the latest outcome per document id, so a
    document that fails and later succeeds is counted once, as a success.
    Partial failures retry the failed subset with exponential backoff; a
    transport failure of the whole call retries the same pending set after a
    fixed delay. Both kinds share the ``retry_attempts`` budget of a batch.
    """

    def __init__(
        self,
        store: SearchStore,
        config: IndexingConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.store = store
        self.config = config or IndexingConfig()
        self.sleep = sleep
        self.clock = clock
        self.logger = logger or structlog.get_logger("blog_indexer.indexer")

    def index(self, documents: Sequence[CandidateDocument]) -> IndexingResult:
        total = IndexingResult()
        if not documents:
            self.logger.info("index_nothing_to_do")
            return total
        indexed_at = int(self.clock())
        prepared = [IndexedDocument.from_candidate(doc, indexed_at) for doc in documents]
        batches = list(chunked(prepared, self.config.batch_size))
        self.logger.info(
            "indexing_started",
            documents=len(prepared),
            batches=len(batches),
            batch_size=self.config.batch_size,
        )
        for number, batch in enumerate(batches, start=1):
            total.merge(self.index_batch(batch, number))
            if number < len(batches) and self.config.delay_between_batches > 0:
                self.sleep(self.config.delay_between_batches)
        self.logger.info("indexing_complete", success=total.success, failed=total.failed)
        return total

    def index_batch(self, batch: Sequence[IndexedDocument], number: int = 1) -> IndexingResult:
        ledger: dict[str, UpsertOutcome] = {}
        pending = list(batch)
        max_attempts = self.config.retry_attempts
        attempt = 0
        while pending and attempt < max_attempts:
            attempt += 1
            self.logger.debug(
                "index_batch_attempt",
                batch=number,
                attempt=attempt,
                max_attempts=max_attempts,
                documents=len(pending),
            )
            try:
                outcomes = self.store.upsert([doc.to_record() for doc in pending])
            except StoreError as exc:
                self.logger.warning(
                    "index_batch_transport_error", batch=number, attempt=attempt, error=str(exc)
                )
                for doc in pending:
                    ledger[doc.id] = UpsertOutcome(doc.id, False, str(exc))
                if attempt < max_attempts:
                    self.sleep(self.config.transport_retry_delay)
                continue

            failed_docs: list[IndexedDocument] = []
            for position, doc in enumerate(pending):
                if position < len(outcomes):
                    outcome = outcomes[position]
                    outcome = UpsertOutcome(doc.id, outcome.success, outcome.error)
                else:
                    outcome = UpsertOutcome(doc.id, False, "missing_result")
                ledger[doc.id] = outcome
                if not outcome.success:
                    failed_docs.append(doc)
            self.logger.info(
                "index_batch_result",
                batch=number,
                attempt=attempt,
                success=len(pending) - len(failed_docs),
                failed=len(failed_docs),
            )
            pending = failed_docs
            if pending and attempt < max_attempts:
                delay = self.config.retry_backoff * (2 ** (attempt - 1))
                self.logger.info(
                    "index_batch_retry", batch=number, documents=len(pending), delay=delay
                )
                self.sleep(delay)

        result = IndexingResult()
        for outcome in ledger.values():
            if outcome.success:
                result.success += 1
            else:
                result.failed += 1
                result.failures.append(outcome)
        if result.failures:
            self.logger.error(
                "index_batch_failed",
                batch=number,
                attempts=attempt,
                failed=result.failed,
                errors=[f"{item.id}: {item.error}" for item in result.failures[:10]],
            )
        return result


__all__ = ["Indexer", "IndexingResult"]
