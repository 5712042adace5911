"""Candidate link discovery."""

from .aggregate import discover_links
from .base import DiscoveryError, DiscoverySource, is_blog_url
from .sources import (
    SOURCE_TYPES,
    DevToSource,
    HackerNewsSource,
    LobstersSource,
    RedditSource,
)

__all__ = [
    "DevToSource",
    "DiscoveryError",
    "DiscoverySource",
    "HackerNewsSource",
    "LobstersSource",
    "RedditSource",
    "SOURCE_TYPES",
    "discover_links",
    "is_blog_url",
]
