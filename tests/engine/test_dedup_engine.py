from __future__ import annotations

from dataclasses import replace

import pytest

from blog_indexer.engine import DedupEngine, Snapshot
from blog_indexer.fingerprint import content_hash
from blog_indexer.models import IndexedDocument


def _record(document) -> dict:
    return IndexedDocument.from_candidate(document, 1_700_000_000).to_record()


def _with_content(document, words: list[str]):
    text = " ".join(words)
    return replace(
        document, content=text, content_hash=content_hash(text), word_count=len(words)
    )


def test_url_match_against_snapshot(make_document, store_factory) -> None:
    stored = make_document("stored")
    candidate = make_document("fresh", url=stored.url)
    engine = DedupEngine()
    snapshot = engine.load_snapshot(store_factory([_record(stored)]))
    result = engine.filter([candidate], snapshot)
    assert result.accepted == []
    assert [(item.reason, item.matched_id) for item in result.duplicates] == [
        ("url_hash", stored.id)
    ]


def test_content_match_within_one_run(make_document) -> None:
    first = make_document("same")
    second = make_document("same", url="https://mirror.example.net/same")
    result = DedupEngine().filter([first, second])
    assert result.accepted == [first]
    assert [(item.reason, item.matched_id) for item in result.duplicates] == [
        ("content_hash", first.id)
    ]


@pytest.mark.parametrize("reverse", [False, True])
def test_title_similarity_keeps_one_regardless_of_order(make_document, reverse) -> None:
    title = "Understanding Python asyncio event loops deeply"
    first = replace(make_document("one"), title=title)
    second = replace(make_document("two"), title=title)
    candidates = [second, first] if reverse else [first, second]
    result = DedupEngine().filter(candidates)
    assert len(result.accepted) == 1
    assert result.duplicates[0].reason == "title_similarity"


def test_content_prefix_similarity_flags_near_duplicates(make_document) -> None:
    words = [f"sharedterm{index}" for index in range(300)]
    first = _with_content(make_document("near1"), words)
    second = _with_content(make_document("near2"), words + ["appendix"])
    result = DedupEngine().filter([first, second])
    assert result.accepted == [first]
    assert result.duplicates[0].reason == "content_similarity"


def test_long_articles_skip_content_similarity(make_document) -> None:
    words = [f"sharedterm{index}" for index in range(1200)]
    first = _with_content(make_document("long1"), words)
    second = _with_content(make_document("long2"), words + ["appendix"])
    result = DedupEngine().filter([first, second])
    assert result.accepted == [first, second]


def test_quality_rejections(make_document) -> None:
    thin = replace(make_document("thin"), content="too short")
    untitled = replace(make_document("untitled"), title="   ")
    good = make_document("good")
    result = DedupEngine().filter([thin, untitled, good])
    assert result.accepted == [good]
    assert [item.reason for item in result.low_quality] == [
        "insufficient_content",
        "missing_essential_fields",
    ]


def test_load_snapshot_pages_through_store(make_document, store_factory) -> None:
    store = store_factory([_record(make_document(f"doc{index}")) for index in range(5)])
    snapshot = DedupEngine().load_snapshot(store, per_page=2)
    assert len(snapshot) == 5
    assert [call[2] for call in store.search_calls] == [1, 2, 3]


def test_missing_collection_gives_empty_snapshot(fake_store) -> None:
    fake_store.missing = True
    snapshot = DedupEngine().load_snapshot(fake_store)
    assert isinstance(snapshot, Snapshot)
    assert len(snapshot) == 0


def test_find_duplicates_in_stored_records(make_document) -> None:
    original = _record(make_document("orig"))
    copy = dict(original, id="copy-id", url="https://copy.example.com/orig")
    moved = dict(_record(make_document("moved")), url_hash=original["url_hash"], id="moved-id")
    duplicates = DedupEngine().find_duplicates([original, copy, moved])
    assert [(item.matched_id, item.reason) for item in duplicates] == [
        ("copy-id", "url_hash"),
        ("moved-id", "url_hash"),
    ]
