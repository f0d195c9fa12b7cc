"""
Feed Source
===========

Opens a feed location and hands back a readable stream.

Remote feeds are fetched over HTTP(S) with a ``requests`` session in a single
attempt. Local paths and ``file://`` URLs are opened from disk, which keeps
saved feeds usable offline.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import requests

from rssdigest.config.settings import get_settings
from rssdigest.utils.logging import get_logger_for_component
from rssdigest.utils.exceptions import ErrorCode, FeedFetchError, ValidationError
from rssdigest.utils.validators import URLValidator


class SourceStream:
    """Readable handle on an opened feed.

    Wraps either a streamed ``requests.Response`` or a local file object.
    ``close`` is idempotent.
    """

    def __init__(
        self,
        handle: Any,
        url: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        self._handle = handle
        self.url = url
        self.headers = headers or {}
        self.closed = False

    def read(self) -> bytes:
        """Read the whole document."""
        if self.closed:
            raise ValueError(f"Stream for {self.url} is closed")
        if isinstance(self._handle, requests.Response):
            return self._handle.content
        return self._handle.read()

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._handle.close()

    def __enter__(self) -> "SourceStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class FeedSource:
    """Opens feed locations. One session is shared by every ``open`` call."""

    ACCEPT_HEADER = (
        "application/rss+xml, application/atom+xml, application/rdf+xml, "
        "application/xml;q=0.9, text/xml;q=0.9, */*;q=0.8"
    )

    def __init__(self, timeout: Optional[int] = None, session: Optional[requests.Session] = None):
        """Initialize feed source.

        Args:
            timeout: Request timeout in seconds (default from config)
            session: Preconfigured requests session (optional)
        """
        settings = get_settings()
        self.timeout = timeout or settings.fetch.request_timeout
        self.logger = get_logger_for_component("feed_source")

        # No retry adapter is mounted: a feed gets exactly one attempt
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": settings.fetch.user_agent,
                "Accept": self.ACCEPT_HEADER,
            }
        )

    def open(self, url: str) -> SourceStream:
        """
        Open a feed location.

        Args:
            url: http(s) URL, ``file://`` URL or filesystem path

        Returns:
            SourceStream positioned at the start of the document

        Raises:
            FeedFetchError: If the location cannot be opened
        """
        if not url or not isinstance(url, str):
            raise FeedFetchError(
                "Feed location is required",
                error_code=ErrorCode.FEED_INVALID_URL,
                recoverable=False,
            )

        if URLValidator.is_remote(url):
            return self._open_remote(url)
        return self._open_local(url)

    def _open_remote(self, url: str) -> SourceStream:
        try:
            validated_url = URLValidator.validate_feed_url(url)
        except ValidationError as e:
            raise FeedFetchError(
                str(e), feed_url=url, error_code=ErrorCode.FEED_INVALID_URL, recoverable=False
            ) from e

        self.logger.info(f"Fetching RSS feed: {validated_url}")

        try:
            response = self.session.get(validated_url, timeout=self.timeout, stream=True)
        except requests.Timeout as e:
            raise FeedFetchError(
                f"Request timeout after {self.timeout}s",
                feed_url=url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e
        except requests.RequestException as e:
            raise FeedFetchError(
                f"Failed to fetch feed: {e}",
                feed_url=url,
                error_code=ErrorCode.FEED_NETWORK_ERROR,
            ) from e

        if response.status_code != 200:
            status, reason = response.status_code, response.reason
            response.close()
            raise FeedFetchError(
                f"HTTP {status}: {reason}",
                feed_url=url,
                error_code=self._status_error_code(status),
                context={"status_code": status},
            )

        return SourceStream(response, url=response.url or validated_url, headers=dict(response.headers))

    def _open_local(self, url: str) -> SourceStream:
        path = URLValidator.local_path(url)
        scheme = url.split(":", 1)[0].lower() if "://" in url else ""
        if scheme and scheme != "file":
            raise FeedFetchError(
                f"Unsupported feed location scheme: {scheme}",
                feed_url=url,
                error_code=ErrorCode.FEED_INVALID_URL,
                recoverable=False,
            )

        self.logger.info(f"Reading RSS feed from file: {path}")

        try:
            handle = open(path, "rb")
        except FileNotFoundError as e:
            raise FeedFetchError(
                f"No such file: {path}", feed_url=url, error_code=ErrorCode.FEED_NOT_FOUND
            ) from e
        except PermissionError as e:
            raise FeedFetchError(
                f"Permission denied: {path}",
                feed_url=url,
                error_code=ErrorCode.FEED_ACCESS_DENIED,
                recoverable=False,
            ) from e
        except OSError as e:
            raise FeedFetchError(
                f"Cannot open {path}: {e}", feed_url=url, error_code=ErrorCode.FEED_NETWORK_ERROR
            ) from e

        return SourceStream(handle, url=Path(path).resolve().as_uri())

    @staticmethod
    def _status_error_code(status: int) -> ErrorCode:
        if status in (401, 403):
            return ErrorCode.FEED_ACCESS_DENIED
        if status in (404, 410):
            return ErrorCode.FEED_NOT_FOUND
        if status in (408, 504):
            return ErrorCode.FEED_FETCH_TIMEOUT
        return ErrorCode.FEED_NETWORK_ERROR
