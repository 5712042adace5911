"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    AppConfig,
    DedupConfig,
    DiscoveryConfig,
    ExtractionConfig,
    IndexingConfig,
    ScheduleConfig,
    ScheduleType,
    StoreConfig,
    SubredditConfig,
)

__all__ = [
    "AppConfig",
    "ConfigLocator",
    "ConfigRepository",
    "DedupConfig",
    "DiscoveryConfig",
    "ExtractionConfig",
    "IndexingConfig",
    "ScheduleConfig",
    "ScheduleType",
    "StoreConfig",
    "SubredditConfig",
]
