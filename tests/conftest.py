"""
PyTest Configuration and Fixtures
=================================

Shared fixtures for RssDigest tests. Nothing here touches the network:
feed sources are stubs or in-memory streams.
"""

import io
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["RSSDIGEST_LOGGING__CONSOLE_LOGGING"] = "false"
os.environ.pop("RSSDIGEST_LOGGING__FILE_PATH", None)


# ============================================================================
# Stub collaborators
# ============================================================================


class StubStream:
    """In-memory stand-in for an opened feed."""

    def __init__(self, data=b"", url="https://example.com/feed.xml", headers=None):
        self._buffer = io.BytesIO(data if isinstance(data, bytes) else data.encode("utf-8"))
        self.url = url
        self.headers = headers or {}
        self.closed = False
        self.close_calls = 0

    def read(self):
        return self._buffer.read()

    def close(self):
        self.close_calls += 1
        self.closed = True


class StubSource:
    """Feed source returning a prepared stream, or raising a prepared error."""

    def __init__(self, stream=None, error=None):
        self.stream = stream if stream is not None else StubStream()
        self.error = error
        self.opened = []

    def open(self, url):
        self.opened.append(url)
        if self.error is not None:
            raise self.error
        return self.stream


class StubNormalizer:
    """Normalizer returning a prepared NormalizedFeed (or None)."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.streams = []

    def parse(self, stream):
        self.streams.append(stream)
        if self.error is not None:
            raise self.error
        return self.result


class EchoCleaner:
    """Cleaner that tags output by conversion kind, optionally failing on given inputs."""

    def __init__(self, fail_on=(), error_type=None):
        self.fail_on = set(fail_on)
        self.error_type = error_type

    def _check(self, text):
        from rssdigest.utils.exceptions import ContentConversionError

        if text is None or text in self.fail_on:
            raise (self.error_type or ContentConversionError)(f"cannot convert {text!r}")

    def convert_generic(self, text):
        self._check(text)
        return f"generic:{text}"

    def convert_html(self, text):
        self._check(text)
        return f"html:{text}"


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def iso_days_ago(now):
    """Format a date ``days`` before now as an ISO-8601 string."""

    def _iso(days):
        return (now - timedelta(days=days)).isoformat()

    return _iso


@pytest.fixture
def stub_stream():
    return StubStream()


@pytest.fixture
def echo_cleaner():
    return EchoCleaner()


@pytest.fixture
def make_parser(stub_stream):
    """Build a FeedParser around stub collaborators."""
    from rssdigest.processing.feed_parser import FeedParser

    def _make(normalized=None, cleaner=None, source=None, normalizer=None, feed_id="test"):
        return FeedParser(
            feed_id,
            "https://example.com/feed.xml",
            source=source or StubSource(stub_stream),
            normalizer=normalizer or StubNormalizer(normalized),
            cleaner=cleaner or EchoCleaner(),
        )

    return _make


@pytest.fixture
def sample_rss():
    """RSS 2.0 document with one fresh, one stale and one undated item."""
    fresh = (datetime.now(timezone.utc) - timedelta(hours=2)).strftime("%a, %d %b %Y %H:%M:%S +0000")
    return f"""<?xml version="1.0" encoding="UTF-8"?>
    <rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
        <channel>
            <title>Test RSS Feed</title>
            <link>http://example.com/</link>
            <description>Test feed &amp; friends</description>
            <item>
                <title>Fresh # Article</title>
                <link>http://example.com/fresh</link>
                <description>Fresh summary</description>
                <content:encoded><![CDATA[<p>Fresh <em>body</em></p>]]></content:encoded>
                <pubDate>{fresh}</pubDate>
            </item>
            <item>
                <title>Stale Article</title>
                <link>http://example.com/stale</link>
                <description>Stale summary</description>
                <pubDate>Thu, 05 Sep 2019 12:00:00 GMT</pubDate>
            </item>
            <item>
                <title>Undated Article</title>
                <link>http://example.com/undated</link>
                <description>Undated summary</description>
            </item>
        </channel>
    </rss>"""
