from __future__ import annotations

import json
from pathlib import Path

import pytest

from blog_indexer.config.loader import ConfigLocator, ConfigRepository
from blog_indexer.config.models import AppConfig, ExtractionConfig, StoreConfig


def test_config_locator_uses_env_and_creates_directories(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("BLOG_INDEXER_HOME", str(tmp_path))
    locator = ConfigLocator()
    assert locator.project_root == tmp_path.resolve()
    assert locator.data_dir.is_dir()
    assert locator.logs_dir.is_dir()
    assert locator.config_path() == tmp_path.resolve() / "data" / "config.yaml"


def test_load_config_writes_defaults_on_first_use(
    temp_config_repository: ConfigRepository,
) -> None:
    config = temp_config_repository.load_config()
    assert config == AppConfig()
    assert temp_config_repository.locator.config_path().exists()


def test_config_repository_roundtrip(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BLOG_INDEXER_HOME", raising=False)
    repo = ConfigRepository(ConfigLocator(project_root=tmp_path))
    config = AppConfig(
        extraction=ExtractionConfig(parallel_limit=8, pool_size=4),
        store=StoreConfig(url="http://search:8108/", collection="posts"),
    )
    repo.save_config(config)

    fresh = ConfigRepository(ConfigLocator(project_root=tmp_path))
    loaded = fresh.load_config()
    assert loaded == config
    assert loaded.store.url == "http://search:8108"


def test_load_links_accepts_list_and_mapping(
    temp_config_repository: ConfigRepository, tmp_path: Path
) -> None:
    as_list = tmp_path / "links.json"
    as_list.write_text(
        json.dumps([{"title": "A", "url": "https://a.dev/post", "source": "manual", "score": 3}]),
        encoding="utf-8",
    )
    as_mapping = tmp_path / "links.yaml"
    as_mapping.write_text("links:\n  - url: https://b.dev/post\n", encoding="utf-8")

    first = temp_config_repository.load_links(as_list)
    second = temp_config_repository.load_links(as_mapping)
    assert [(link.url, link.source, link.score) for link in first] == [
        ("https://a.dev/post", "manual", 3)
    ]
    assert [(link.url, link.source) for link in second] == [("https://b.dev/post", "unknown")]


def test_load_links_rejects_bad_input(
    temp_config_repository: ConfigRepository, tmp_path: Path
) -> None:
    with pytest.raises(FileNotFoundError):
        temp_config_repository.load_links(tmp_path / "missing.json")

    text_file = tmp_path / "links.txt"
    text_file.write_text("https://a.dev", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load_links(text_file)

    no_url = tmp_path / "broken.json"
    no_url.write_text(json.dumps([{"title": "no url"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load_links(no_url)
