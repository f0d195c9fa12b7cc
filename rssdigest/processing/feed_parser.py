"""
Feed Parser
===========

Fetch -> normalize -> recency filter -> clean, for a single feed.

The feed location is opened when the parser is constructed. Failing to open
it is logged and remembered rather than raised; ``fetch`` then returns None.
``fetch`` never raises for source, parse, date or cleaning problems: the
caller gets a ``Feed`` or None.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from rssdigest.ingestion.content_cleaner import TextCleaner
from rssdigest.ingestion.feed_normalizer import FeedNormalizer
from rssdigest.ingestion.feed_source import FeedSource
from rssdigest.models import Entry, Feed, NormalizedFeed, RawEntry
from rssdigest.processing.date_resolution import comparison_date
from rssdigest.utils.exceptions import FeedParseError
from rssdigest.utils.logging import PerformanceLogger, get_logger_for_component
from rssdigest.utils.result import attempt, unwrap_or


class FeedParser:
    """Produces a cleaned, recency-filtered Feed from one feed location."""

    def __init__(
        self,
        feed_id: str,
        url: str,
        source: Optional[FeedSource] = None,
        normalizer: Optional[FeedNormalizer] = None,
        cleaner: Optional[TextCleaner] = None,
    ):
        """Open the feed location.

        Args:
            feed_id: Identifier the caller files this feed under
            url: Feed location (http(s) URL, file URL or path)
            source: Opener for the location (default FeedSource)
            normalizer: Feed document parser (default FeedNormalizer)
            cleaner: Text converter (default TextCleaner)
        """
        self.id = feed_id
        self.url = url
        self.logger = get_logger_for_component("feed_parser", feed_id=feed_id)

        self._normalizer = normalizer or FeedNormalizer()
        self._cleaner = cleaner or TextCleaner()
        self._stream: Any = None
        self._fetched = False

        try:
            self._stream = (source or FeedSource()).open(url)
        except Exception as e:
            self.logger.error(f"Cannot read {url}: {e}")

    @property
    def available(self) -> bool:
        """Whether there is an opened source left to fetch from."""
        return self._stream is not None

    def fetch(self, age: float = 1) -> Optional[Feed]:
        """
        Fetch the feed and keep entries from the last ``age`` days.

        Args:
            age: Recency window in days, fractions allowed

        Returns:
            Cleaned Feed, or None if the source or the document was unusable
        """
        if age < 0:
            self.close()
            raise ValueError(f"age must not be negative, got {age}")

        if self._stream is None:
            if self._fetched:
                self.logger.warning(f"Feed {self.url} was already fetched")
            return None

        with PerformanceLogger(self.logger, f"fetch of {self.url}", feed_url=self.url):
            try:
                normalized = self._normalize()
            finally:
                self.close()
                self._fetched = True

            if normalized is None:
                return None

            try:
                return self._build_feed(normalized, age)
            except Exception as e:
                self.logger.error(f"Failed to process feed {self.url}: {e}", exc_info=True)
                return None

    def close(self) -> None:
        """Release the opened source. Safe to call more than once."""
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.close()
        except OSError as e:
            self.logger.warning(f"Failed to close source for {self.url}: {e}")

    def __enter__(self) -> "FeedParser":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FeedParser(id={self.id!r}, url={self.url!r}, available={self.available})"

    def _normalize(self) -> Optional[NormalizedFeed]:
        try:
            normalized = self._normalizer.parse(self._stream)
        except FeedParseError as e:
            self.logger.warning(f"Cannot parse {self.url}: {e}")
            return None
        except Exception as e:
            self.logger.error(f"Unexpected error parsing {self.url}: {e}", exc_info=True)
            return None

        if normalized is None:
            self.logger.warning(f"No feed in {self.url}")
        return normalized

    def _build_feed(self, normalized: NormalizedFeed, age: float) -> Feed:
        now = datetime.now(timezone.utc)
        date_threshold = now - timedelta(days=age)

        entries = []
        for raw in normalized.entries:
            date, dated = comparison_date(raw, now)
            if date < date_threshold:
                self.logger.debug(
                    f"Skipping old entry from {self.url}: "
                    f"dated {date.strftime('%Y-%m-%d %H:%M')} "
                    f"(older than {date_threshold.strftime('%Y-%m-%d %H:%M')})"
                )
                continue
            entries.append(self._clean_entry(raw, date if dated else None))

        feed = Feed(
            title=self._convert(self._cleaner.convert_generic, normalized.title, "feed title"),
            description=self._convert(
                self._cleaner.convert_generic, normalized.description, "feed description"
            ),
            url=normalized.url or "",
            entries=entries,
        )

        self.logger.info(
            f"Kept {len(entries)}/{len(normalized.entries)} entries from {self.url}"
        )
        return feed

    def _clean_entry(self, raw: RawEntry, published: Optional[datetime]) -> Entry:
        return Entry(
            title=self._convert(self._cleaner.convert_html, raw.title, "entry title"),
            content=self._convert(self._cleaner.convert_html, self._entry_body(raw), "entry content"),
            published=published,
            link=raw.link or "",
        )

    @staticmethod
    def _entry_body(raw: RawEntry) -> Optional[str]:
        """Entry content, or its description when the content is missing or blank."""
        body = raw.content if raw.content is not None else raw.description
        if body is not None and not body.strip():
            body = raw.description
        return body

    def _convert(self, convert: Callable[[str], str], value: Optional[str], field_name: str) -> str:
        """Run one field through the cleaner; a failure leaves the field empty."""
        if value is None:
            return ""

        result = attempt(convert, value)
        if not result.is_ok:
            self.logger.warning(f"Could not clean {field_name} of {self.url}: {result.reason}")
        return unwrap_or(result, "")
