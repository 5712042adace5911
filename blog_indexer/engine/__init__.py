"""Engine components orchestrating extract → dedup → index."""

from .batching import BatchExtractor, ExtractionReport, FailedLink, chunked
from .dedup import DedupEngine, FilterResult, Rejection, Snapshot
from .fanout import Settled, gather_settled
from .indexer import Indexer, IndexingResult
from .limiter import ConcurrencyLimiter
from .resource_pool import PoolClosedError, PoolInitializationError, ResourcePool

__all__ = [
    "BatchExtractor",
    "ConcurrencyLimiter",
    "DedupEngine",
    "ExtractionReport",
    "FailedLink",
    "FilterResult",
    "Indexer",
    "IndexingResult",
    "PoolClosedError",
    "PoolInitializationError",
    "Rejection",
    "ResourcePool",
    "Settled",
    "Snapshot",
    "chunked",
    "gather_settled",
]
