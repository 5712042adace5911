"""Shared fixtures: in-memory store, scripted extractor and run configuration."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterable, Sequence

import pytest

from blog_indexer.config import (
    AppConfig,
    ConfigLocator,
    ConfigRepository,
    DedupConfig,
    ExtractionConfig,
    IndexingConfig,
)
from blog_indexer.models import CandidateDocument, CandidateLink, ExtractedContent
from blog_indexer.store.base import (
    CollectionNotFoundError,
    SearchPage,
    SearchStore,
    StoreError,
    UpsertOutcome,
)

FIXED_NOW = 1_700_000_000


class FakeStore(SearchStore):
    """Paginated in-memory store with scripted upsert failures."""

    def __init__(self, records: Iterable[dict[str, Any]] = ()) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        for record in records:
            self.documents[record["id"]] = dict(record)
        self.fail_plan: dict[str, int] = {}
        self.transport_failures = 0
        self.missing = False
        self.search_error: Exception | None = None
        self.search_calls: list[tuple[str, tuple[str, ...], int, int]] = []
        self.upsert_calls: list[list[str]] = []
        self.closed = False
        self.ensured = False

    def search(
        self, query: str, fields: Sequence[str], page: int = 1, per_page: int = 250
    ) -> SearchPage:
        self.search_calls.append((query, tuple(fields), page, per_page))
        if self.missing:
            raise CollectionNotFoundError("Collection not found: blogs")
        if self.search_error is not None:
            raise self.search_error
        records = list(self.documents.values())
        start = (page - 1) * per_page
        hits = [dict(record) for record in records[start : start + per_page]]
        return SearchPage(hits=hits, found=len(records))

    def upsert(self, records: Sequence[dict[str, Any]]) -> list[UpsertOutcome]:
        self.upsert_calls.append([record["id"] for record in records])
        if self.transport_failures > 0:
            self.transport_failures -= 1
            raise StoreError("connection reset by peer")
        outcomes: list[UpsertOutcome] = []
        for record in records:
            remaining = self.fail_plan.get(record["id"], 0)
            if remaining > 0:
                self.fail_plan[record["id"]] = remaining - 1
                outcomes.append(UpsertOutcome(record["id"], False, "rejected"))
                continue
            self.documents[record["id"]] = dict(record)
            outcomes.append(UpsertOutcome(record["id"], True))
        return outcomes

    def ensure_collection(self) -> None:
        self.ensured = True

    def close(self) -> None:
        self.closed = True


class FakeResource:
    def __init__(self, number: int) -> None:
        self.number = number
        self.closed = False

    def close(self) -> None:
        self.closed = True


class FakeResourceFactory:
    def __init__(self, fail_on: int | None = None) -> None:
        self.fail_on = fail_on
        self.created: list[FakeResource] = []

    def __call__(self) -> FakeResource:
        number = len(self.created) + 1
        if self.fail_on is not None and number == self.fail_on:
            raise RuntimeError(f"browser {number} failed to launch")
        resource = FakeResource(number)
        self.created.append(resource)
        return resource


def build_content(slug: str, words: int = 300, title: str | None = None) -> ExtractedContent:
    body = " ".join(f"{slug}term{index}" for index in range(words))
    return ExtractedContent(
        title=title if title is not None else f"Notes on {slug}topic internals",
        author="Ada",
        content=body,
        tags=["python"],
        created_at=FIXED_NOW,
        word_count=words,
        reading_time=0,
    )


def build_link(slug: str, **overrides: Any) -> CandidateLink:
    values: dict[str, Any] = {
        "title": f"Notes on {slug}topic internals",
        "url": f"https://blog.example.com/posts/{slug}",
        "source": "test",
        "score": 10,
    }
    values.update(overrides)
    return CandidateLink(**values)


class FakeExtractor:
    """Serve scripted outcomes per URL; unknown URLs get a 300-word article."""

    def __init__(self) -> None:
        self.scripts: dict[str, list[Any]] = {}
        self.attempts: dict[str, int] = defaultdict(int)
        self.resources_seen: list[FakeResource] = []
        self._lock = Lock()

    def script(self, url: str, *outcomes: Any) -> None:
        self.scripts[url] = list(outcomes)

    def extract(self, url: str, resource: FakeResource) -> ExtractedContent:
        with self._lock:
            self.attempts[url] += 1
            attempt = self.attempts[url]
            self.resources_seen.append(resource)
        script = self.scripts.get(url)
        if script:
            outcome = script[min(attempt, len(script)) - 1]
        else:
            outcome = build_content(url.rsplit("/", 1)[-1])
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def store_factory() -> Callable[..., FakeStore]:
    return FakeStore


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def resource_factory() -> FakeResourceFactory:
    return FakeResourceFactory()


@pytest.fixture
def failing_resource_factory() -> Callable[[int], FakeResourceFactory]:
    return lambda fail_on: FakeResourceFactory(fail_on=fail_on)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_link() -> Callable[..., CandidateLink]:
    return build_link


@pytest.fixture
def make_content() -> Callable[..., ExtractedContent]:
    return build_content


@pytest.fixture
def make_document() -> Callable[..., CandidateDocument]:
    def _builder(slug: str, words: int = 300, **link_overrides: Any) -> CandidateDocument:
        return CandidateDocument.from_extraction(
            build_link(slug, **link_overrides), build_content(slug, words), now=FIXED_NOW
        )

    return _builder


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        extraction=ExtractionConfig(
            parallel_limit=3,
            batch_size=5,
            pool_size=2,
            retry_attempts=2,
            retry_delay=1.0,
            delay_between_batches=0.0,
        ),
        dedup=DedupConfig(),
        indexing=IndexingConfig(
            batch_size=50,
            retry_attempts=3,
            retry_backoff=0.5,
            transport_retry_delay=2.0,
            delay_between_batches=0.0,
        ),
    )


@pytest.fixture
def temp_config_repository(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("BLOG_INDEXER_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository
