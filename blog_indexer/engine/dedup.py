"""Duplicate and quality filtering of candidate documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

import structlog

from ..config import DedupConfig
from ..fingerprint import jaccard_similarity, tokenize
from ..models import CandidateDocument
from ..store.base import CollectionNotFoundError, SearchStore


@dataclass(frozen=True, slots=True)
class Fingerprint:
    """The parts of a document that duplicate detection compares."""

    id: str
    title: str
    url: str
    url_hash: str
    content_hash: str
    word_count: int
    title_tokens: frozenset[str]
    prefix_tokens: frozenset[str]


@dataclass(slots=True)
class DuplicateMatch:
    reason: str  # url_hash | content_hash | title_similarity | content_similarity
    matched_id: str
    score: float = 1.0


@dataclass(slots=True)
class Rejection:
    url: str
    title: str
    reason: str
    matched_id: str | None = None


@dataclass
class FilterResult:
    accepted: list[CandidateDocument] = field(default_factory=list)
    duplicates: list[Rejection] = field(default_factory=list)
    low_quality: list[Rejection] = field(default_factory=list)


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of the stored corpus, read once per run."""

    fingerprints: tuple[Fingerprint, ...] = ()
    url_index: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    content_index: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_fingerprints(cls, fingerprints: Iterable[Fingerprint]) -> "Snapshot":
        items = tuple(fingerprints)
        url_index: dict[str, str] = {}
        content_index: dict[str, str] = {}
        for fp in items:
            if fp.url_hash:
                url_index.setdefault(fp.url_hash, fp.id)
            if fp.content_hash:
                content_index.setdefault(fp.content_hash, fp.id)
        return cls(
            fingerprints=items,
            url_index=MappingProxyType(url_index),
            content_index=MappingProxyType(content_index),
        )

    def __len__(self) -> int:
        return len(self.fingerprints)


class _AcceptedSet:
    """Documents accepted earlier in the current run."""

    def __init__(self) -> None:
        self.fingerprints: list[Fingerprint] = []
        self.url_index: dict[str, str] = {}
        self.content_index: dict[str, str] = {}

    def add(self, fingerprint: Fingerprint) -> None:
        self.fingerprints.append(fingerprint)
        self.url_index.setdefault(fingerprint.url_hash, fingerprint.id)
        self.content_index.setdefault(fingerprint.content_hash, fingerprint.id)


class DedupEngine:
    """Classify candidates as new, exact duplicate, near duplicate or low quality."""

    def __init__(
        self, config: DedupConfig | None = None, logger: structlog.BoundLogger | None = None
    ) -> None:
        self.config = config or DedupConfig()
        self.logger = logger or structlog.get_logger("blog_indexer.dedup")

    # ------------------------------------------------------------------
    # Fingerprints
    # ------------------------------------------------------------------
    def fingerprint(self, document: CandidateDocument) -> Fingerprint:
        return self._build(
            id=document.id,
            title=document.title,
            url=document.url,
            url_hash=document.url_hash,
            content_hash=document.content_hash,
            content=document.content,
            word_count=document.word_count,
        )

    def fingerprint_record(self, record: Mapping[str, Any]) -> Fingerprint:
        return self._build(
            id=str(record.get("id") or ""),
            title=str(record.get("title") or ""),
            url=str(record.get("url") or ""),
            url_hash=str(record.get("url_hash") or ""),
            content_hash=str(record.get("content_hash") or ""),
            content=str(record.get("content") or ""),
            word_count=int(record.get("wordCount") or 0),
        )

    def _build(self, *, content: str, **values: Any) -> Fingerprint:
        prefix = content[: self.config.content_prefix_chars]
        return Fingerprint(
            title_tokens=tokenize(values["title"]),
            prefix_tokens=tokenize(prefix),
            **values,
        )

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    def load_snapshot(self, store: SearchStore, per_page: int = 250) -> Snapshot:
        try:
            fingerprints = [
                self.fingerprint_record(record)
                for record in store.iter_documents(per_page=per_page)
            ]
        except CollectionNotFoundError:
            self.logger.info("snapshot_collection_missing")
            return Snapshot()
        snapshot = Snapshot.from_fingerprints(fingerprints)
        self.logger.info("snapshot_loaded", documents=len(snapshot))
        return snapshot

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------
    def quality_issue(self, document: CandidateDocument) -> str | None:
        content = document.content or ""
        if not content or len(content) < self.config.min_content_length:
            return "insufficient_content"
        if not (document.title or "").strip() or not (document.url or "").strip():
            return "missing_essential_fields"
        return None

    def match(
        self, candidate: Fingerprint, existing: Iterable[Fingerprint]
    ) -> DuplicateMatch | None:
        for other in existing:
            found = self._compare(candidate, other)
            if found is not None:
                return found
        return None

    def _compare(self, candidate: Fingerprint, other: Fingerprint) -> DuplicateMatch | None:
        if candidate.url_hash and candidate.url_hash == other.url_hash:
            return DuplicateMatch("url_hash", other.id)
        if candidate.content_hash and candidate.content_hash == other.content_hash:
            return DuplicateMatch("content_hash", other.id)
        title_score = jaccard_similarity(candidate.title_tokens, other.title_tokens)
        if title_score >= self.config.title_similarity_threshold:
            return DuplicateMatch("title_similarity", other.id, title_score)
        limit = self.config.long_article_word_count
        if candidate.word_count < limit and other.word_count < limit:
            content_score = jaccard_similarity(candidate.prefix_tokens, other.prefix_tokens)
            if content_score >= self.config.similarity_threshold:
                return DuplicateMatch("content_similarity", other.id, content_score)
        return None

    def _find_duplicate(
        self, candidate: Fingerprint, snapshot: Snapshot, accepted: _AcceptedSet
    ) -> DuplicateMatch | None:
        # Exact hash lookups first, then the pairwise similarity scan.
        for pool in (snapshot, accepted):
            if candidate.url_hash in pool.url_index:
                return DuplicateMatch("url_hash", pool.url_index[candidate.url_hash])
            if candidate.content_hash in pool.content_index:
                return DuplicateMatch("content_hash", pool.content_index[candidate.content_hash])
        return self.match(candidate, snapshot.fingerprints) or self.match(
            candidate, accepted.fingerprints
        )

    def filter(
        self, candidates: Sequence[CandidateDocument], snapshot: Snapshot | None = None
    ) -> FilterResult:
        snapshot = snapshot or Snapshot()
        result = FilterResult()
        accepted = _AcceptedSet()
        for document in candidates:
            issue = self.quality_issue(document)
            if issue is not None:
                result.low_quality.append(Rejection(document.url, document.title, issue))
                continue
            candidate = self.fingerprint(document)
            duplicate = self._find_duplicate(candidate, snapshot, accepted)
            if duplicate is not None:
                self.logger.info(
                    "duplicate_skipped",
                    url=document.url,
                    title=document.title,
                    reason=duplicate.reason,
                    score=round(duplicate.score, 3),
                )
                result.duplicates.append(
                    Rejection(document.url, document.title, duplicate.reason, duplicate.matched_id)
                )
                continue
            accepted.add(candidate)
            result.accepted.append(document)
        self.logger.info(
            "filter_complete",
            accepted=len(result.accepted),
            duplicates=len(result.duplicates),
            low_quality=len(result.low_quality),
        )
        return result

    def find_duplicates(self, records: Iterable[Mapping[str, Any]]) -> list[Rejection]:
        """Audit stored records for exact duplicates, keeping the first seen."""

        seen_urls: set[str] = set()
        seen_contents: set[str] = set()
        duplicates: list[Rejection] = []
        for record in records:
            u_hash = str(record.get("url_hash") or "")
            c_hash = str(record.get("content_hash") or "")
            if (u_hash and u_hash in seen_urls) or (c_hash and c_hash in seen_contents):
                reason = "url_hash" if u_hash in seen_urls else "content_hash"
                duplicates.append(
                    Rejection(
                        url=str(record.get("url") or ""),
                        title=str(record.get("title") or ""),
                        reason=reason,
                        matched_id=str(record.get("id") or ""),
                    )
                )
                continue
            if u_hash:
                seen_urls.add(u_hash)
            if c_hash:
                seen_contents.add(c_hash)
        return duplicates


__all__ = [
    "DedupEngine",
    "DuplicateMatch",
    "FilterResult",
    "Fingerprint",
    "Rejection",
    "Snapshot",
]
