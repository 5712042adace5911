"""Identity hashes and token-set similarity used for duplicate detection."""

from __future__ import annotations

import hashlib
from typing import AbstractSet
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

TRACKING_PARAMS = frozenset(
    {"utm_source", "utm_medium", "utm_campaign", "utm_content", "utm_term", "ref", "source"}
)
MIN_TOKEN_LENGTH = 4


def normalize_url(url: str) -> str:
    """Strip tracking parameters and canonicalise the query string order."""

    parts = urlsplit(url.strip())
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Not an absolute URL: {url!r}")
    query = sorted(
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in TRACKING_PARAMS
    )
    path = parts.path or "/"
    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), parts.fragment)).lower()


def url_hash(url: str) -> str:
    try:
        normalized = normalize_url(url)
    except ValueError:
        normalized = url.lower()
    return hashlib.md5(normalized.encode("utf-8")).hexdigest()


def content_hash(content: str) -> str:
    return hashlib.sha256(content.lower().strip().encode("utf-8")).hexdigest()


def tokenize(text: str | None) -> frozenset[str]:
    if not text:
        return frozenset()
    return frozenset(token for token in text.lower().split() if len(token) >= MIN_TOKEN_LENGTH)


def jaccard_similarity(first: AbstractSet[str], second: AbstractSet[str]) -> float:
    union = len(first | second)
    if union == 0:
        return 0.0
    return len(first & second) / union


def text_similarity(first: str | None, second: str | None) -> float:
    return jaccard_similarity(tokenize(first), tokenize(second))


__all__ = [
    "TRACKING_PARAMS",
    "content_hash",
    "jaccard_similarity",
    "normalize_url",
    "text_similarity",
    "tokenize",
    "url_hash",
]
