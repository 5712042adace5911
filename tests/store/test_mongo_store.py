from __future__ import annotations

import pytest
from pymongo.errors import BulkWriteError, ServerSelectionTimeoutError

from blog_indexer.config import StoreConfig
from blog_indexer.store import MongoSearchStore, StoreError


class StubCollection:
    name = "blogs"

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.operations: list = []
        self.ordered: bool | None = None

    def bulk_write(self, operations, ordered=True):
        self.operations = list(operations)
        self.ordered = ordered
        if self.error is not None:
            raise self.error


class StubClient:
    def __init__(self, collection: StubCollection) -> None:
        self.collection = collection
        self.closed = False

    def __getitem__(self, name):
        return {"blogs": self.collection}

    def close(self) -> None:
        self.closed = True


def test_upsert_reports_per_document_write_errors() -> None:
    error = BulkWriteError({"writeErrors": [{"index": 1, "errmsg": "document too large"}]})
    collection = StubCollection(error)
    store = MongoSearchStore(StoreConfig(backend="mongodb"), client=StubClient(collection))
    outcomes = store.upsert([{"id": "a", "title": "A"}, {"id": "b", "title": "B"}])
    assert [(item.id, item.success, item.error) for item in outcomes] == [
        ("a", True, None),
        ("b", False, "document too large"),
    ]
    assert collection.ordered is False
    assert len(collection.operations) == 2


def test_other_mongo_errors_become_store_errors() -> None:
    collection = StubCollection(ServerSelectionTimeoutError("no servers"))
    store = MongoSearchStore(StoreConfig(backend="mongodb"), client=StubClient(collection))
    with pytest.raises(StoreError):
        store.upsert([{"id": "a"}])


def test_close_releases_client() -> None:
    client = StubClient(StubCollection())
    MongoSearchStore(StoreConfig(backend="mongodb"), client=client).close()
    assert client.closed
