"""Pydantic models used across the blog-indexer configuration flow."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
MAX_SEARCH_PAGE_SIZE = 250

DiscoverySourceName = Literal["hackernews", "lobsters", "reddit", "devto"]


class ScheduleType(str, Enum):
    """Scheduler modes for recurring pipeline runs."""

    CRON = "cron"
    INTERVAL = "interval"
    ONCE = "once"


class ScheduleConfig(BaseModel):
    """Configuration describing when the pipeline should run."""

    type: ScheduleType = Field(default=ScheduleType.ONCE)
    value: Any = Field(
        default=None,
        description="Cron expression, interval seconds or ISO datetime, depending on type.",
    )

    @model_validator(mode="after")
    def _validate_value(self) -> "ScheduleConfig":
        if self.type is ScheduleType.CRON and not isinstance(self.value, str):
            raise ValueError("Cron schedule requires string expression")
        if self.type is ScheduleType.INTERVAL and not isinstance(self.value, (int, float, dict)):
            raise ValueError("Interval schedule requires seconds (int/float) or kwargs dict")
        if (
            self.type is ScheduleType.ONCE
            and self.value is not None
            and not isinstance(self.value, str)
        ):
            raise ValueError("Once schedule expects ISO datetime string or null")
        return self


class ExtractionConfig(BaseModel):
    """Batching, concurrency and retry settings for the extraction stage."""

    parallel_limit: int = 5
    batch_size: int = 10
    retry_attempts: int = 2
    retry_delay: float = 1.0
    delay_between_batches: float = 2.0
    extraction_timeout: int = 30000  # milliseconds
    pool_size: int = 3
    min_word_count: int = 200
    headless: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    viewport_size: tuple[int, int] = (1920, 1080)
    blocked_resource_types: list[str] = Field(
        default_factory=lambda: ["image", "media", "font", "stylesheet"]
    )

    @field_validator("parallel_limit", "batch_size", "pool_size", "extraction_timeout")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("value must be >= 1")
        return value

    @field_validator("retry_attempts", "min_word_count")
    @classmethod
    def _non_negative_int(cls, value: int) -> int:
        if value < 0:
            raise ValueError("value must be >= 0")
        return value

    @field_validator("retry_delay", "delay_between_batches")
    @classmethod
    def _non_negative_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("Delay values must be non-negative")
        return float(value)


class DedupConfig(BaseModel):
    """Thresholds for exact and approximate duplicate detection."""

    similarity_threshold: float = 0.8
    title_similarity_threshold: float = 0.9
    min_content_length: int = 200
    long_article_word_count: int = 1000
    content_prefix_chars: int = 500

    @field_validator("similarity_threshold", "title_similarity_threshold")
    @classmethod
    def _ratio(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("Similarity thresholds must lie within [0, 1]")
        return float(value)

    @field_validator("min_content_length", "long_article_word_count", "content_prefix_chars")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("value must be >= 0")
        return value


class IndexingConfig(BaseModel):
    """Batching and retry settings for writes into the search store."""

    batch_size: int = 50
    retry_attempts: int = 3
    retry_backoff: float = 0.5
    transport_retry_delay: float = 2.0
    delay_between_batches: float = 0.5
    snapshot_page_size: int = 250

    @field_validator("batch_size", "retry_attempts", "snapshot_page_size")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("value must be >= 1")
        return value

    @field_validator("retry_backoff", "transport_retry_delay", "delay_between_batches")
    @classmethod
    def _non_negative_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("Delay values must be non-negative")
        return float(value)

    @field_validator("snapshot_page_size")
    @classmethod
    def _search_page_limit(cls, value: int) -> int:
        if value > MAX_SEARCH_PAGE_SIZE:
            raise ValueError(f"snapshot_page_size must be <= {MAX_SEARCH_PAGE_SIZE}")
        return value


class StoreConfig(BaseModel):
    """Connection details for the search store backend."""

    backend: Literal["typesense", "mongodb"] = "typesense"
    url: str = "http://localhost:8108"
    api_key: str = "xyz"
    collection: str = "blogs"
    connection_timeout: float = 2.0
    mongo_uri: str = "mongodb://localhost:27017"
    database: str = "blog_indexer"

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class SubredditConfig(BaseModel):
    name: str
    min_score: int = 0


def _default_subreddits() -> list[SubredditConfig]:
    return [
        SubredditConfig(name="TrueReddit", min_score=50),
        SubredditConfig(name="DepthHub", min_score=20),
        SubredditConfig(name="programming", min_score=100),
        SubredditConfig(name="MachineLearning", min_score=30),
    ]


class DiscoveryConfig(BaseModel):
    """Which feeds to poll for candidate links and how to filter them."""

    sources: list[DiscoverySourceName] = Field(
        default_factory=lambda: ["hackernews", "lobsters", "reddit", "devto"]
    )
    request_timeout: float = 10.0
    user_agent: str = "Mozilla/5.0 (compatible; BlogBot/1.0)"
    subreddits: list[SubredditConfig] = Field(default_factory=_default_subreddits)
    exclude_domains: list[str] = Field(
        default_factory=lambda: [
            "github.com",
            "youtube.com",
            "twitter.com",
            "facebook.com",
            "linkedin.com",
            "instagram.com",
            "amazon.com",
            "wikipedia.org",
            "docs.google.com",
        ]
    )
    exclude_extensions: list[str] = Field(
        default_factory=lambda: [".pdf", ".doc", ".docx", ".zip", ".png", ".jpg", ".mp4"]
    )


class AppConfig(BaseModel):
    """Top-level configuration shared by the CLI, scheduler and pipeline."""

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    indexing: IndexingConfig = Field(default_factory=IndexingConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)


__all__ = [
    "AppConfig",
    "DedupConfig",
    "DiscoveryConfig",
    "DiscoverySourceName",
    "ExtractionConfig",
    "IndexingConfig",
    "ScheduleConfig",
    "ScheduleType",
    "StoreConfig",
    "SubredditConfig",
]
