"""Runtime records flowing through discovery, extraction, dedup and indexing."""

from __future__ import annotations

import math
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from .fingerprint import content_hash, url_hash

WORDS_PER_MINUTE = 200


def reading_time_for(word_count: int) -> int:
    return math.ceil(word_count / WORDS_PER_MINUTE) if word_count > 0 else 0


@dataclass(slots=True)
class CandidateLink:
    """A link produced by a discovery source."""

    title: str
    url: str
    source: str = "unknown"
    score: float = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CandidateLink":
        if not isinstance(data, Mapping):
            raise ValueError(f"Link entry must be a mapping, got {type(data).__name__}")
        url = str(data.get("url") or "").strip()
        if not url:
            raise ValueError("Link entry is missing a url")
        return cls(
            title=str(data.get("title") or "").strip(),
            url=url,
            source=str(data.get("source") or "unknown"),
            score=data.get("score") or 0,
        )


@dataclass(slots=True)
class ExtractedContent:
    """Article fields pulled out of a rendered page."""

    title: str = ""
    author: str = ""
    content: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: int = 0
    word_count: int = 0
    reading_time: int = 0


@dataclass(slots=True)
class CandidateDocument:
    """Extracted content merged with its link, carrying identity hashes."""

    id: str
    title: str
    author: str
    content: str
    tags: list[str]
    created_at: int
    url: str
    source: str
    score: float
    word_count: int
    reading_time: int
    extraction_time: int
    url_hash: str
    content_hash: str

    @classmethod
    def from_extraction(
        cls,
        link: CandidateLink,
        extracted: ExtractedContent,
        extraction_time: int = 0,
        now: float | None = None,
    ) -> "CandidateDocument":
        content = extracted.content or ""
        identity = url_hash(link.url)
        word_count = extracted.word_count or len(content.split())
        return cls(
            id=identity,
            title=(extracted.title or link.title or "").strip(),
            author=extracted.author or "Unknown",
            content=content,
            tags=list(extracted.tags or []),
            created_at=extracted.created_at or int(now if now is not None else time.time()),
            url=link.url,
            source=link.source or "unknown",
            score=link.score or 0,
            word_count=word_count,
            reading_time=extracted.reading_time or reading_time_for(word_count),
            extraction_time=int(extraction_time),
            url_hash=identity,
            content_hash=content_hash(content),
        )


@dataclass(slots=True)
class IndexedDocument(CandidateDocument):
    """Document as written to the search store."""

    indexed_at: int
    search_text: str

    @classmethod
    def from_candidate(cls, document: CandidateDocument, indexed_at: int) -> "IndexedDocument":
        values = {name: getattr(document, name) for name in CandidateDocument.__dataclass_fields__}
        values["title"] = document.title or "Untitled"
        values["author"] = document.author or "Unknown"
        search_text = " ".join(
            (values["title"], document.content, " ".join(document.tags), values["author"])
        ).lower()
        return cls(**values, indexed_at=int(indexed_at), search_text=search_text)

    def to_record(self) -> dict[str, Any]:
        # Wire names match the existing "blogs" collection schema.
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "content": self.content,
            "tags": list(self.tags),
            "created_at": int(self.created_at),
            "url": self.url,
            "source": self.source,
            "score": float(self.score),
            "wordCount": int(self.word_count),
            "readingTime": int(self.reading_time),
            "extractionTime": int(self.extraction_time),
            "url_hash": self.url_hash,
            "content_hash": self.content_hash,
            "indexed_at": self.indexed_at,
            "search_text": self.search_text,
        }


@dataclass(slots=True)
class RunSummary:
    """Aggregate counts returned to the caller of a pipeline run."""

    success: int = 0
    failed: int = 0
    duplicates: int = 0
    low_quality: int = 0
    total_processed: int = 0
    processing_time_ms: int = 0

    @property
    def success_rate(self) -> float:
        if not self.total_processed:
            return 0.0
        return self.success / self.total_processed

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


__all__ = [
    "CandidateDocument",
    "CandidateLink",
    "ExtractedContent",
    "IndexedDocument",
    "RunSummary",
    "reading_time_for",
]
