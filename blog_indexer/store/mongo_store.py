"""MongoDB-backed search store."""

from __future__ import annotations

import re
from typing import Any, Sequence

import structlog
from pymongo import MongoClient, ReplaceOne
from pymongo.errors import BulkWriteError, PyMongoError

from ..config import StoreConfig
from .base import SearchPage, SearchStore, StoreError, UpsertOutcome


class MongoSearchStore(SearchStore):
    """Keep indexed documents in a MongoDB collection keyed by ``_id``."""

    def __init__(
        self,
        config: StoreConfig,
        client: MongoClient | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("blog_indexer.store.mongo")
        self.client = client or MongoClient(
            config.mongo_uri, serverSelectionTimeoutMS=int(config.connection_timeout * 1000)
        )
        self.collection = self.client[config.database][config.collection]

    def search(
        self, query: str, fields: Sequence[str], page: int = 1, per_page: int = 250
    ) -> SearchPage:
        criteria: dict[str, Any] = {}
        if query and query != "*":
            pattern = re.compile(re.escape(query), re.IGNORECASE)
            criteria = {"$or": [{name: pattern} for name in fields]}
        try:
            found = self.collection.count_documents(criteria)
            cursor = (
                self.collection.find(criteria)
                .sort("_id", 1)
                .skip(max(page - 1, 0) * per_page)
                .limit(per_page)
            )
            hits = [self._to_record(doc) for doc in cursor]
        except PyMongoError as exc:
            raise StoreError(f"MongoDB search failed: {exc}") from exc
        return SearchPage(hits=hits, found=found)

    def upsert(self, records: Sequence[dict[str, Any]]) -> list[UpsertOutcome]:
        if not records:
            return []
        operations = [
            ReplaceOne({"_id": record["id"]}, self._to_document(record), upsert=True)
            for record in records
        ]
        errors: dict[int, str] = {}
        try:
            self.collection.bulk_write(operations, ordered=False)
        except BulkWriteError as exc:
            for item in exc.details.get("writeErrors", []):
                errors[int(item.get("index", -1))] = str(item.get("errmsg", "write_error"))
        except PyMongoError as exc:
            raise StoreError(f"MongoDB upsert failed: {exc}") from exc
        return [
            UpsertOutcome(str(record["id"]), index not in errors, errors.get(index))
            for index, record in enumerate(records)
        ]

    def ensure_collection(self) -> None:
        try:
            self.collection.create_index("url_hash")
            self.collection.create_index("content_hash")
        except PyMongoError as exc:
            raise StoreError(f"MongoDB index creation failed: {exc}") from exc
        self.logger.info("collection_ready", collection=self.collection.name)

    def close(self) -> None:
        self.client.close()

    @staticmethod
    def _to_document(record: dict[str, Any]) -> dict[str, Any]:
        document = {key: value for key, value in record.items() if key != "id"}
        document["_id"] = record["id"]
        return document

    @staticmethod
    def _to_record(document: dict[str, Any]) -> dict[str, Any]:
        record = {key: value for key, value in document.items() if key != "_id"}
        record["id"] = str(document.get("_id", ""))
        return record


__all__ = ["MongoSearchStore"]
