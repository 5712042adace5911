"""Search store backends."""

from .base import (
    SNAPSHOT_FIELDS,
    CollectionNotFoundError,
    SearchPage,
    SearchStore,
    StoreError,
    UpsertOutcome,
)
from .mongo_store import MongoSearchStore
from .typesense_store import TypesenseStore

__all__ = [
    "CollectionNotFoundError",
    "MongoSearchStore",
    "SNAPSHOT_FIELDS",
    "SearchPage",
    "SearchStore",
    "StoreError",
    "TypesenseStore",
    "UpsertOutcome",
]
