"""
RssDigest Processing Module
===========================

Per-feed pipeline: fetch, normalize, recency filter and clean.
"""

from .feed_parser import FeedParser
from .date_resolution import comparison_date, parse_date, resolve_entry_date

__all__ = [
    'FeedParser',
    'comparison_date',
    'parse_date',
    'resolve_entry_date',
]
