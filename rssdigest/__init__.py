"""
RssDigest - Feed to ConTeXt Document Builder
============================================

Fetches RSS/Atom feeds, keeps recent entries, converts their text to
ConTeXt and renders everything into one typeset document.

Main Components:
- Ingestion: feed source, feedparser normalization, HTML to ConTeXt cleaning
- Processing: per-feed fetch pipeline with recency filtering
- Delivery: ConTeXt document formatter
- Configuration: environment variables with Pydantic validation
"""

__version__ = "1.0.0"
__author__ = "RssDigest Development Team"
__description__ = "Render recent feed entries as a ConTeXt document"

from .config.settings import get_settings
from .models import Entry, Feed, NamedFeedCollection
from .processing.feed_parser import FeedParser
from .delivery.context_formatter import FeedFormatter
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import RssDigestError

__all__ = [
    "get_settings",
    "Entry",
    "Feed",
    "NamedFeedCollection",
    "FeedParser",
    "FeedFormatter",
    "configure_application_logging",
    "get_logger_for_component",
    "RssDigestError",
]
