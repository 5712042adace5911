"""Typesense collection accessed over its REST API."""

from __future__ import annotations

import json
from typing import Any, Sequence

import httpx
import structlog

from ..config import StoreConfig
from .base import CollectionNotFoundError, SearchPage, SearchStore, StoreError, UpsertOutcome

COLLECTION_SCHEMA_FIELDS: list[dict[str, Any]] = [
    {"name": "title", "type": "string"},
    {"name": "author", "type": "string", "facet": True},
    {"name": "content", "type": "string"},
    {"name": "tags", "type": "string[]", "facet": True},
    {"name": "created_at", "type": "int64"},
    {"name": "url", "type": "string"},
    {"name": "source", "type": "string", "facet": True},
    {"name": "score", "type": "float"},
    {"name": "wordCount", "type": "int32"},
    {"name": "readingTime", "type": "int32"},
    {"name": "extractionTime", "type": "int32"},
    {"name": "url_hash", "type": "string"},
    {"name": "content_hash", "type": "string"},
    {"name": "indexed_at", "type": "int64"},
    {"name": "search_text", "type": "string"},
]


class TypesenseStore(SearchStore):
    """Search and upsert documents in one Typesense collection."""

    def __init__(
        self,
        config: StoreConfig,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.collection = config.collection
        self.logger = logger or structlog.get_logger("blog_indexer.store.typesense")
        self._client = client or httpx.Client(
            base_url=config.url,
            timeout=config.connection_timeout,
            headers={"X-TYPESENSE-API-KEY": config.api_key},
        )

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    def search(
        self, query: str, fields: Sequence[str], page: int = 1, per_page: int = 250
    ) -> SearchPage:
        params = {
            "q": query,
            "query_by": ",".join(fields),
            "page": page,
            "per_page": per_page,
        }
        response = self._request(
            "GET", f"/collections/{self.collection}/documents/search", params=params
        )
        payload = response.json()
        hits = [hit.get("document", {}) for hit in payload.get("hits", [])]
        return SearchPage(hits=hits, found=int(payload.get("found", len(hits))))

    def upsert(self, records: Sequence[dict[str, Any]]) -> list[UpsertOutcome]:
        if not records:
            return []
        body = "\n".join(json.dumps(record, ensure_ascii=False) for record in records)
        response = self._request(
            "POST",
            f"/collections/{self.collection}/documents/import",
            params={"action": "upsert"},
            content=body.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )
        return self._parse_import(response.text, records)

    def ensure_collection(self) -> None:
        try:
            self._request("GET", f"/collections/{self.collection}")
        except CollectionNotFoundError:
            pass
        else:
            self.logger.info("collection_exists", collection=self.collection)
            return
        schema = {
            "name": self.collection,
            "fields": COLLECTION_SCHEMA_FIELDS,
            "default_sorting_field": "created_at",
        }
        self._request("POST", "/collections", json=schema)
        self.logger.info("collection_created", collection=self.collection)

    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"Typesense request failed: {exc}") from exc
        if response.status_code == 404:
            raise CollectionNotFoundError(f"Collection not found: {self.collection}")
        if response.status_code >= 400:
            raise StoreError(
                f"Typesense returned {response.status_code} for {path}: {response.text[:200]}"
            )
        return response

    @staticmethod
    def _parse_import(text: str, records: Sequence[dict[str, Any]]) -> list[UpsertOutcome]:
        outcomes: list[UpsertOutcome] = []
        lines = [line for line in text.splitlines() if line.strip()]
        for index, record in enumerate(records):
            doc_id = str(record.get("id", ""))
            if index >= len(lines):
                outcomes.append(UpsertOutcome(doc_id, False, "missing_result"))
                continue
            try:
                item = json.loads(lines[index])
            except json.JSONDecodeError:
                outcomes.append(UpsertOutcome(doc_id, False, "invalid_result"))
                continue
            if item.get("success"):
                outcomes.append(UpsertOutcome(doc_id, True))
            else:
                outcomes.append(UpsertOutcome(doc_id, False, item.get("error") or "unknown_error"))
        return outcomes


__all__ = ["COLLECTION_SCHEMA_FIELDS", "TypesenseStore"]
