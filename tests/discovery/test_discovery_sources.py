from __future__ import annotations

import httpx
import pytest

from blog_indexer.config import DiscoveryConfig, SubredditConfig
from blog_indexer.discovery import (
    DevToSource,
    DiscoveryError,
    HackerNewsSource,
    LobstersSource,
    RedditSource,
    discover_links,
    is_blog_url,
)

HN_HTML = """
<table>
  <tr><td><span class="titleline"><a href="https://jvns.ca/blog/dns">How DNS works</a></span></td></tr>
  <tr><td><span class="titleline"><a href="item?id=1">Ask HN: anything</a></span></td></tr>
  <tr><td><span class="titleline"><a href="https://github.com/org/repo">A repo</a></span></td></tr>
  <tr><td><span class="titleline"><a href="https://example.org/paper.pdf">A paper</a></span></td></tr>
</table>
"""


def _client(routes: dict[str, httpx.Response]) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        key = f"{request.url.host}{request.url.path}"
        response = routes.get(key)
        if response is None:
            return httpx.Response(404)
        return response

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_is_blog_url_filters_domains_and_extensions() -> None:
    config = DiscoveryConfig()
    assert is_blog_url("https://jvns.ca/blog/dns", config.exclude_domains, config.exclude_extensions)
    assert not is_blog_url("https://www.youtube.com/watch?v=1", config.exclude_domains)
    assert not is_blog_url("https://x.org/file.PDF", (), config.exclude_extensions)
    assert not is_blog_url("")


def test_hackernews_parses_titlelines() -> None:
    client = _client({"news.ycombinator.com/": httpx.Response(200, text=HN_HTML)})
    links = HackerNewsSource().discover(client)
    assert [(link.title, link.url, link.source) for link in links] == [
        ("How DNS works", "https://jvns.ca/blog/dns", "hackernews")
    ]


def test_lobsters_reads_hottest_json() -> None:
    payload = [
        {"title": "Zig comptime", "url": "https://kristoff.it/blog/zig", "score": 42},
        {"title": "Meta thread", "url": "https://lobste.rs/s/abc", "score": 5},
        {"title": "Text post", "url": "", "score": 3},
    ]
    client = _client({"lobste.rs/hottest.json": httpx.Response(200, json=payload)})
    links = LobstersSource().discover(client)
    assert [(link.url, link.score) for link in links] == [("https://kristoff.it/blog/zig", 42)]


def test_reddit_applies_min_score_and_skips_failing_subreddits() -> None:
    config = DiscoveryConfig(
        subreddits=[SubredditConfig(name="programming", min_score=100), SubredditConfig(name="down")]
    )
    listing = {
        "data": {
            "children": [
                {"data": {"title": "Deep dive", "url": "https://blog.a.dev/deep", "score": 150}},
                {"data": {"title": "Low", "url": "https://blog.a.dev/low", "score": 10}},
                {"data": {"title": "Self", "url": "https://www.reddit.com/r/x", "score": 900}},
            ]
        }
    }
    client = _client(
        {
            "www.reddit.com/r/programming/hot.json": httpx.Response(200, json=listing),
            "www.reddit.com/r/down/hot.json": httpx.Response(503),
        }
    )
    links = RedditSource(config).discover(client)
    assert [(link.url, link.source) for link in links] == [
        ("https://blog.a.dev/deep", "reddit_programming")
    ]


def test_devto_uses_canonical_urls() -> None:
    articles = [
        {"title": "Cross-post", "canonical_url": "https://me.dev/post", "public_reactions_count": 7},
        {"title": "Native", "canonical_url": "https://dev.to/me/native", "public_reactions_count": 9},
    ]
    client = _client({"dev.to/api/articles": httpx.Response(200, json=articles)})
    links = DevToSource().discover(client)
    assert [(link.url, link.score) for link in links] == [("https://me.dev/post", 7)]


def test_discover_links_merges_and_tolerates_failures() -> None:
    lobsters = [{"title": "Shared", "url": "https://jvns.ca/blog/dns", "score": 1}]
    client = _client(
        {
            "news.ycombinator.com/": httpx.Response(200, text=HN_HTML),
            "lobste.rs/hottest.json": httpx.Response(200, json=lobsters),
            "dev.to/api/articles": httpx.Response(500),
        }
    )
    links = discover_links([HackerNewsSource(), LobstersSource(), DevToSource()], client)
    assert [(link.url, link.source) for link in links] == [
        ("https://jvns.ca/blog/dns", "hackernews")
    ]


def test_discover_links_raises_when_every_source_fails() -> None:
    client = _client({})
    with pytest.raises(DiscoveryError):
        discover_links([HackerNewsSource(), DevToSource()], client)


def test_reddit_raises_when_every_subreddit_fails() -> None:
    config = DiscoveryConfig(subreddits=[SubredditConfig(name="down"), SubredditConfig(name="gone")])
    client = _client({})
    with pytest.raises(DiscoveryError):
        RedditSource(config).discover(client)
    with pytest.raises(DiscoveryError):
        discover_links([RedditSource(config)], client)
