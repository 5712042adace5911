"""Concrete link feeds: Hacker News, Lobsters, Reddit and DEV."""

from __future__ import annotations

from urllib.parse import urljoin

import httpx
from selectolax.parser import HTMLParser

from ..models import CandidateLink
from .base import DiscoveryError, DiscoverySource

HACKER_NEWS_URL = "https://news.ycombinator.com/"
LOBSTERS_URL = "https://lobste.rs/hottest.json"
REDDIT_URL = "https://www.reddit.com/r/{name}/hot.json"
DEVTO_URL = "https://dev.to/api/articles"


class HackerNewsSource(DiscoverySource):
    name = "hackernews"

    def discover(self, client: httpx.Client) -> list[CandidateLink]:
        response = self._get(client, HACKER_NEWS_URL)
        parser = HTMLParser(response.text)
        links: list[CandidateLink] = []
        for node in parser.css(".titleline > a"):
            href = (node.attributes.get("href") or "").strip()
            if not href:
                continue
            url = urljoin(HACKER_NEWS_URL, href)
            if "news.ycombinator.com" in url:
                continue
            title = node.text(strip=True)
            links.append(CandidateLink(title=title, url=url, source=self.name))
        return self.filter_links(links)


class LobstersSource(DiscoverySource):
    name = "lobsters"

    def discover(self, client: httpx.Client) -> list[CandidateLink]:
        stories = self._get(client, LOBSTERS_URL).json()
        links = [
            CandidateLink(
                title=story.get("title", ""),
                url=story["url"],
                source=self.name,
                score=story.get("score") or 0,
            )
            for story in stories
            if story.get("url") and "lobste.rs" not in story["url"]
        ]
        return self.filter_links(links)


class RedditSource(DiscoverySource):
    name = "reddit"

    def discover(self, client: httpx.Client) -> list[CandidateLink]:
        links: list[CandidateLink] = []
        failed: list[str] = []
        for subreddit in self.config.subreddits:
            try:
                payload = self._get(
                    client, REDDIT_URL.format(name=subreddit.name), params={"limit": 25}
                ).json()
            except (httpx.HTTPError, ValueError) as exc:
                self.logger.warning("subreddit_failed", subreddit=subreddit.name, error=str(exc))
                failed.append(subreddit.name)
                continue
            children = (payload.get("data") or {}).get("children") or []
            for child in children:
                post = child.get("data") or {}
                url = post.get("url") or ""
                score = post.get("score") or 0
                if not url or "reddit.com" in url or score < subreddit.min_score:
                    continue
                links.append(
                    CandidateLink(
                        title=post.get("title", ""),
                        url=url,
                        source=f"reddit_{subreddit.name}",
                        score=score,
                    )
                )
        if failed and len(failed) == len(self.config.subreddits):
            raise DiscoveryError(f"Every subreddit failed: {', '.join(failed)}")
        return self.filter_links(links)


class DevToSource(DiscoverySource):
    name = "devto"

    def discover(self, client: httpx.Client) -> list[CandidateLink]:
        articles = self._get(client, DEVTO_URL, params={"per_page": 30, "top": 7}).json()
        links = [
            CandidateLink(
                title=article.get("title", ""),
                url=article["canonical_url"],
                source=self.name,
                score=article.get("public_reactions_count") or 0,
            )
            for article in articles
            if article.get("canonical_url") and "dev.to" not in article["canonical_url"]
        ]
        return self.filter_links(links)


SOURCE_TYPES: dict[str, type[DiscoverySource]] = {
    source.name: source
    for source in (HackerNewsSource, LobstersSource, RedditSource, DevToSource)
}


__all__ = [
    "DevToSource",
    "HackerNewsSource",
    "LobstersSource",
    "RedditSource",
    "SOURCE_TYPES",
]
