"""Article field extraction from rendered HTML."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable

from selectolax.parser import HTMLParser, Node

from ..models import ExtractedContent, reading_time_for

TITLE_SELECTORS = ["h1", ".post-title", "article h1", "title"]
AUTHOR_SELECTORS = ['meta[name="author"]', ".author", ".byline", '[rel="author"]']
CONTENT_SELECTORS = [
    "article",
    ".post-content",
    ".entry-content",
    ".content",
    "main",
    '[role="main"]',
]
NOISE_SELECTORS = ["nav", ".nav", ".navigation", ".ads", ".advertisement", "script", "style"]
TAG_SELECTORS = [".tags a", ".tag", ".categories a", ".category", '[rel="tag"]']
DATE_SELECTORS = [
    "time[datetime]::attr:datetime",
    'meta[property="article:published_time"]::attr:content',
    'meta[name="date"]::attr:content',
    ".published",
    ".date",
]


def _node_text(node: Node) -> str:
    return " ".join(node.text(separator=" ", strip=True).split())


def parse_date(value: str) -> int | None:
    """Parse an ISO-8601 or RFC-2822 date into unix seconds."""

    value = (value or "").strip()
    if not value:
        return None
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


class ArticleParser:
    """Pull title, author, body, tags and date out of a blog page."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self.clock = clock

    def parse(self, html: str, url: str = "") -> ExtractedContent:
        tree = HTMLParser(html or "")
        title = self._first_text(tree, TITLE_SELECTORS)
        author = self._author(tree)
        tags = self._tags(tree)
        created_at = self._created_at(tree)
        for selector in NOISE_SELECTORS:
            for node in tree.css(selector):
                node.decompose()
        content = self._content(tree)
        word_count = len(content.split())
        return ExtractedContent(
            title=title,
            author=author,
            content=content,
            tags=tags,
            created_at=created_at if created_at is not None else int(self.clock()),
            word_count=word_count,
            reading_time=reading_time_for(word_count),
        )

    # ------------------------------------------------------------------
    @staticmethod
    def _first_text(tree: HTMLParser, selectors: list[str]) -> str:
        for selector in selectors:
            node = tree.css_first(selector)
            if node is None:
                continue
            text = _node_text(node)
            if text:
                return text
        return ""

    def _author(self, tree: HTMLParser) -> str:
        meta = tree.css_first(AUTHOR_SELECTORS[0])
        if meta is not None:
            value = (meta.attributes.get("content") or "").strip()
            if value:
                return value
        return self._first_text(tree, AUTHOR_SELECTORS[1:])

    @staticmethod
    def _content(tree: HTMLParser) -> str:
        for selector in CONTENT_SELECTORS:
            node = tree.css_first(selector)
            if node is not None:
                text = _node_text(node)
                if text:
                    return text
        body = tree.body
        return _node_text(body) if body is not None else ""

    @staticmethod
    def _tags(tree: HTMLParser) -> list[str]:
        tags: list[str] = []
        seen: set[str] = set()
        for selector in TAG_SELECTORS:
            for node in tree.css(selector):
                text = _node_text(node)
                if text and text not in seen:
                    seen.add(text)
                    tags.append(text)
        return tags

    @staticmethod
    def _created_at(tree: HTMLParser) -> int | None:
        for selector in DATE_SELECTORS:
            css, _, attr = selector.partition("::attr:")
            node = tree.css_first(css)
            if node is None:
                continue
            raw = node.attributes.get(attr) if attr else _node_text(node)
            timestamp = parse_date(raw or "")
            if timestamp is not None:
                return timestamp
        return None


__all__ = ["ArticleParser", "parse_date"]
