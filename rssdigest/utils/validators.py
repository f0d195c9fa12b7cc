"""
RssDigest Input Validators
==========================

Validation utilities for feed locations and feed identifiers.
"""

import re
from pathlib import Path
from urllib.parse import unquote, urlparse, urlunparse

from .exceptions import ValidationError, ErrorCode


class URLValidator:
    """URL validation and normalization utilities."""

    # Allowed schemes for remote feeds
    ALLOWED_SCHEMES = {'http', 'https'}

    # Schemes that are never feed locations
    REJECTED_SCHEME_PATTERN = re.compile(r'^\s*(javascript|data|ftp|mailto):', re.IGNORECASE)

    @classmethod
    def validate_feed_url(cls, url: str) -> str:
        """Validate and normalize a remote feed URL.

        Args:
            url: URL to validate

        Returns:
            Normalized URL

        Raises:
            ValidationError: If URL is invalid
        """
        if not url or not isinstance(url, str):
            raise ValidationError(
                "URL is required and must be a string",
                error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
                field_name="url"
            )

        url = url.strip()

        if cls.REJECTED_SCHEME_PATTERN.match(url):
            raise ValidationError(
                "URL scheme is not allowed for feeds",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url"
            )

        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise ValidationError(
                f"Invalid URL format: {str(e)}",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url"
            ) from e

        if parsed.scheme.lower() not in cls.ALLOWED_SCHEMES:
            raise ValidationError(
                f"URL scheme must be {' or '.join(sorted(cls.ALLOWED_SCHEMES))}",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url"
            )

        if not parsed.netloc:
            raise ValidationError(
                "URL must include a hostname",
                error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
                field_name="url"
            )

        return urlunparse(parsed._replace(
            scheme=parsed.scheme.lower(),
            netloc=parsed.netloc.lower(),
            path=parsed.path or '/',
            fragment=''
        ))

    @staticmethod
    def is_remote(url: str) -> bool:
        """Whether the location names an http(s) resource rather than a local file."""
        return urlparse(url.strip()).scheme.lower() in URLValidator.ALLOWED_SCHEMES

    @staticmethod
    def local_path(url: str) -> Path:
        """Resolve a ``file://`` URL or plain filesystem path to a Path."""
        url = url.strip()
        parsed = urlparse(url)
        if parsed.scheme.lower() == 'file':
            return Path(unquote(parsed.path))
        return Path(url)


def validate_url(url: str) -> bool:
    """
    Quick validation function for remote feed URLs.

    Args:
        url: URL to validate

    Returns:
        True if URL is valid, False otherwise
    """
    try:
        URLValidator.validate_feed_url(url)
        return True
    except ValidationError:
        return False


def parse_feed_option(value: str) -> tuple:
    """Split a ``KEY=URL`` option into its identifier and location.

    Raises:
        ValidationError: If the key or the location is missing
    """
    if not value or '=' not in value:
        raise ValidationError(
            f"Expected KEY=URL, got '{value}'",
            error_code=ErrorCode.VALIDATION_INVALID_FORMAT,
            field_name="feed"
        )

    key, url = value.split('=', 1)
    key, url = key.strip(), url.strip()

    if not key or not url:
        raise ValidationError(
            f"Both key and URL are required in '{value}'",
            error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
            field_name="feed"
        )

    return key, url
