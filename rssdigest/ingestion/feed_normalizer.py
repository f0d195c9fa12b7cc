"""
Feed Normalizer
===============

Turns a fetched RSS 0.9x/1.0/2.0, Atom or RDF document into a
``NormalizedFeed`` using feedparser.

Fields that a format does not carry are left as ``None``; nothing is
cleaned or filtered here.
"""

from typing import Any, Optional

import feedparser

from rssdigest.models import NormalizedFeed, RawEntry
from rssdigest.utils.logging import get_logger_for_component
from rssdigest.utils.exceptions import FeedParseError


class FeedNormalizer:
    """Feedparser-backed normalizer."""

    # Preferred content types when an entry carries several <content> values
    CONTENT_TYPES = ("text/html", "application/xhtml+xml", "text/plain")

    def __init__(self):
        self.logger = get_logger_for_component("feed_normalizer")

    def parse(self, stream: Any) -> Optional[NormalizedFeed]:
        """
        Parse an opened feed stream.

        Args:
            stream: Object with ``read()``; ``url`` and ``headers`` are used when present

        Returns:
            NormalizedFeed, or None when the document holds no feed

        Raises:
            FeedParseError: If the stream cannot be read or parsed
        """
        source_url = getattr(stream, "url", None)

        try:
            document = stream.read()
            parsed = feedparser.parse(
                document, response_headers=getattr(stream, "headers", None) or {}
            )
        except Exception as e:
            raise FeedParseError(f"Failed to parse feed: {e}", feed_url=source_url) from e

        if not document or not self._looks_like_feed(parsed):
            if parsed.get("bozo"):
                self.logger.warning(
                    f"Feed parse failed for {source_url}: {parsed.get('bozo_exception')}"
                )
            else:
                self.logger.warning(f"No feed found in document from {source_url}")
            return None

        if parsed.get("bozo"):
            # Many feeds have minor formatting issues, keep what was recovered
            self.logger.info(
                f"Feed has parse warnings but contains data: {source_url} "
                f"({parsed.get('bozo_exception')})"
            )

        channel = parsed.feed
        entries = [self._extract_entry(entry) for entry in parsed.entries]

        self.logger.debug(f"Normalized {len(entries)} entries from {source_url}")

        return NormalizedFeed(
            title=channel.get("title"),
            description=channel.get("subtitle", channel.get("description")),
            url=channel.get("link") or source_url or parsed.get("href"),
            entries=entries,
        )

    def _looks_like_feed(self, parsed: Any) -> bool:
        """Whether feedparser recovered any feed structure at all."""
        if parsed.get("entries"):
            return True
        channel = parsed.get("feed") or {}
        return bool(parsed.get("version") or channel.get("title"))

    def _extract_entry(self, entry: Any) -> RawEntry:
        return RawEntry(
            title=entry.get("title"),
            content=self._extract_content(entry),
            description=entry.get("summary", entry.get("description")),
            date_published=entry.get("published"),
            last_updated=entry.get("updated"),
            link=entry.get("link"),
            published_parsed=entry.get("published_parsed"),
            updated_parsed=entry.get("updated_parsed"),
        )

    def _extract_content(self, entry: Any) -> Optional[str]:
        """Pick the entry's full content body, or None if it has none."""
        contents = entry.get("content")
        if not contents:
            return None

        # content is a list of dictionaries with type/value
        for content_type in self.CONTENT_TYPES:
            for item in contents:
                if item.get("type") == content_type:
                    return item.get("value", "")

        first = contents[0]
        if isinstance(first, dict):
            return first.get("value", "")
        return str(first)
