"""Browser rendering and article parsing."""

from .browser import BrowserResource, RenderedPage
from .extractor import ExtractionError, PlaywrightExtractor
from .parser import ArticleParser, parse_date

__all__ = [
    "ArticleParser",
    "BrowserResource",
    "ExtractionError",
    "PlaywrightExtractor",
    "RenderedPage",
    "parse_date",
]
