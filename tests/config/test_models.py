from __future__ import annotations

import pytest

from blog_indexer.config import (
    AppConfig,
    DedupConfig,
    ExtractionConfig,
    IndexingConfig,
    ScheduleConfig,
    ScheduleType,
)


def test_schedule_config_interval_requires_numeric() -> None:
    with pytest.raises(ValueError):
        ScheduleConfig(type=ScheduleType.INTERVAL)
    with pytest.raises(ValueError):
        ScheduleConfig(type=ScheduleType.INTERVAL, value="every minute")
    cfg = ScheduleConfig(type=ScheduleType.INTERVAL, value={"minutes": 2})
    assert cfg.value == {"minutes": 2}


def test_schedule_config_cron_requires_string() -> None:
    with pytest.raises(ValueError):
        ScheduleConfig(type=ScheduleType.CRON, value=5)


def test_extraction_limits_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ExtractionConfig(parallel_limit=0)
    with pytest.raises(ValueError):
        ExtractionConfig(pool_size=0)
    with pytest.raises(ValueError):
        ExtractionConfig(retry_delay=-1)
    assert ExtractionConfig(retry_attempts=0).retry_attempts == 0


def test_dedup_thresholds_are_ratios() -> None:
    with pytest.raises(ValueError):
        DedupConfig(similarity_threshold=1.5)
    assert DedupConfig(title_similarity_threshold=1).title_similarity_threshold == 1.0


def test_indexing_requires_at_least_one_attempt() -> None:
    with pytest.raises(ValueError):
        IndexingConfig(retry_attempts=0)


def test_app_config_defaults() -> None:
    config = AppConfig()
    assert (config.extraction.parallel_limit, config.extraction.batch_size) == (5, 10)
    assert (config.extraction.retry_attempts, config.extraction.pool_size) == (2, 3)
    assert config.extraction.extraction_timeout == 30000
    assert config.extraction.min_word_count == 200
    assert (config.dedup.similarity_threshold, config.dedup.title_similarity_threshold) == (0.8, 0.9)
    assert (config.indexing.batch_size, config.indexing.retry_attempts) == (50, 3)
    assert config.store.collection == "blogs"
    assert config.discovery.sources == ["hackernews", "lobsters", "reddit", "devto"]


def test_snapshot_page_size_respects_search_page_limit() -> None:
    assert IndexingConfig(snapshot_page_size=250).snapshot_page_size == 250
    with pytest.raises(ValueError):
        IndexingConfig(snapshot_page_size=251)
    with pytest.raises(ValueError):
        IndexingConfig(snapshot_page_size=0)
