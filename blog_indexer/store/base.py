"""Search store Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence

SNAPSHOT_FIELDS = ("title",)


class StoreError(RuntimeError):
    """Transport or batch-level failure talking to the search store."""


class CollectionNotFoundError(StoreError):
    """The target collection does not exist yet."""


@dataclass(slots=True)
class SearchPage:
    hits: list[dict[str, Any]] = field(default_factory=list)
    found: int = 0


@dataclass(slots=True)
class UpsertOutcome:
    id: str
    success: bool
    error: str | None = None


class SearchStore(ABC):
    """Uniform store contract: paginated search plus idempotent upsert."""

    @abstractmethod
    def search(
        self, query: str, fields: Sequence[str], page: int = 1, per_page: int = 250
    ) -> SearchPage:
        """Return one page of documents matching ``query`` over ``fields``."""

    @abstractmethod
    def upsert(self, records: Sequence[dict[str, Any]]) -> list[UpsertOutcome]:
        """Insert or overwrite records by ``id``; one outcome per record, in order."""

    def ensure_collection(self) -> None:
        """Create the backing collection when the backend needs it."""

    def close(self) -> None:
        """Release underlying resources."""

    def iter_documents(
        self, fields: Sequence[str] = SNAPSHOT_FIELDS, per_page: int = 250
    ) -> Iterator[dict[str, Any]]:
        """Yield every stored document, paging until ``found`` hits were read."""

        page = 1
        seen = 0
        while True:
            result = self.search("*", fields, page=page, per_page=per_page)
            for hit in result.hits:
                yield hit
            seen += len(result.hits)
            if not result.hits or seen >= result.found:
                return
            page += 1


__all__ = [
    "CollectionNotFoundError",
    "SNAPSHOT_FIELDS",
    "SearchPage",
    "SearchStore",
    "StoreError",
    "UpsertOutcome",
]
