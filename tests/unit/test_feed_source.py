"""
Unit tests for FeedSource - opening remote and local feed locations.
"""

from unittest.mock import Mock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from rssdigest.ingestion.feed_source import FeedSource, SourceStream
from rssdigest.utils.exceptions import ErrorCode, FeedFetchError


def make_response(status_code=200, content=b"<rss/>", url="https://example.com/feed.xml"):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code == 200 else "Error"
    response._content = content
    response._content_consumed = True
    response.url = url
    response.headers = CaseInsensitiveDict({"Content-Type": "application/rss+xml"})
    return response


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def source(session):
    return FeedSource(timeout=5, session=session)


class TestRemote:
    """HTTP(S) locations go through the requests session once."""

    def test_open_returns_stream(self, source, session):
        session.get.return_value = make_response(content=b"<rss>data</rss>",
                                                 url="https://example.com/final.xml")

        stream = source.open("https://Example.com/feed.xml")

        session.get.assert_called_once_with("https://example.com/feed.xml", timeout=5, stream=True)
        assert stream.read() == b"<rss>data</rss>"
        assert stream.url == "https://example.com/final.xml"
        assert stream.headers["Content-Type"] == "application/rss+xml"

    def test_sets_request_headers(self, source, session):
        session.headers.update.assert_called_once()
        headers = session.headers.update.call_args[0][0]
        assert "User-Agent" in headers
        assert "rss+xml" in headers["Accept"]

    def test_timeout(self, source, session):
        session.get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(FeedFetchError) as exc_info:
            source.open("https://example.com/feed.xml")

        assert exc_info.value.error_code == ErrorCode.FEED_FETCH_TIMEOUT

    def test_connection_error(self, source, session):
        session.get.side_effect = requests.ConnectionError("DNS failure")

        with pytest.raises(FeedFetchError) as exc_info:
            source.open("https://nowhere.invalid/feed.xml")

        assert exc_info.value.error_code == ErrorCode.FEED_NETWORK_ERROR
        assert exc_info.value.context["feed_url"] == "https://nowhere.invalid/feed.xml"

    @pytest.mark.parametrize(
        "status, code",
        [
            (404, ErrorCode.FEED_NOT_FOUND),
            (403, ErrorCode.FEED_ACCESS_DENIED),
            (500, ErrorCode.FEED_NETWORK_ERROR),
        ],
    )
    def test_http_error_status(self, source, session, status, code):
        response = Mock(status_code=status, reason="Error")
        session.get.return_value = response

        with pytest.raises(FeedFetchError) as exc_info:
            source.open("https://example.com/feed.xml")

        assert exc_info.value.error_code == code
        response.close.assert_called_once()

    def test_malformed_url(self, source, session):
        with pytest.raises(FeedFetchError) as exc_info:
            source.open("http://")

        assert exc_info.value.error_code == ErrorCode.FEED_INVALID_URL
        session.get.assert_not_called()

    def test_empty_location(self, source):
        with pytest.raises(FeedFetchError):
            source.open("")


class TestLocal:
    """Filesystem paths and file:// URLs."""

    def test_open_path(self, source, tmp_path):
        feed_file = tmp_path / "feed.xml"
        feed_file.write_bytes(b"<rss>local</rss>")

        with source.open(str(feed_file)) as stream:
            assert stream.read() == b"<rss>local</rss>"
            assert stream.url.startswith("file://")

        assert stream.closed

    def test_open_file_url(self, source, tmp_path):
        feed_file = tmp_path / "feed.xml"
        feed_file.write_bytes(b"<rss/>")

        stream = source.open(feed_file.as_uri())

        assert stream.read() == b"<rss/>"
        stream.close()

    def test_open_file_url_with_escaped_characters(self, source, tmp_path):
        feed_file = tmp_path / "my feed.xml"
        feed_file.write_bytes(b"<rss/>")

        assert "%20" in feed_file.as_uri()
        with source.open(feed_file.as_uri()) as stream:
            assert stream.read() == b"<rss/>"

    def test_missing_file(self, source, tmp_path):
        with pytest.raises(FeedFetchError) as exc_info:
            source.open(str(tmp_path / "missing.xml"))

        assert exc_info.value.error_code == ErrorCode.FEED_NOT_FOUND

    def test_unsupported_scheme(self, source):
        with pytest.raises(FeedFetchError) as exc_info:
            source.open("ftp://example.com/feed.xml")

        assert exc_info.value.error_code == ErrorCode.FEED_INVALID_URL


class TestSourceStream:
    """Stream wrapper behaviour."""

    def test_close_is_idempotent(self):
        handle = Mock()
        stream = SourceStream(handle, url="file:///tmp/feed.xml")

        stream.close()
        stream.close()

        handle.close.assert_called_once()

    def test_read_after_close(self):
        stream = SourceStream(Mock(), url="file:///tmp/feed.xml")
        stream.close()

        with pytest.raises(ValueError):
            stream.read()
