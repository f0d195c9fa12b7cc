"""
RssDigest Custom Exceptions
===========================

Exception hierarchy for RssDigest with error codes, context information,
and user-friendly error messages.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"

    # Feed ingestion errors (F001-F099)
    FEED_INVALID_URL = "F001"
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_ACCESS_DENIED = "F005"
    FEED_NOT_FOUND = "F006"

    # Content processing errors (P001-P099)
    CONTENT_INVALID = "P001"
    CONTENT_CONVERSION_FAILED = "P002"
    DATE_UNRESOLVED = "P003"

    # Validation errors (V001-V099)
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"

    # Output errors (D001-D099)
    DOCUMENT_WRITE_FAILED = "D001"


class RssDigestError(Exception):
    """Base exception for all RssDigest errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize RssDigest error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: User-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


class ConfigurationError(RssDigestError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            **kwargs: Additional arguments for RssDigestError
        """
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", f"Configuration error: {message}"),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message"]
            },
        )


class FeedError(RssDigestError):
    """Feed ingestion and parsing errors."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        """Initialize feed error.

        Args:
            message: Error message
            feed_url: Feed URL that caused the error
            **kwargs: Additional arguments for RssDigestError
        """
        context = kwargs.get("context", {})
        if feed_url:
            context["feed_url"] = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_NETWORK_ERROR),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Feed processing failed: {message}"
            ),
            recoverable=kwargs.get("recoverable", True),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message", "recoverable"]
            },
        )


class ProcessingError(RssDigestError):
    """Content processing errors."""

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        """Initialize processing error.

        Args:
            message: Error message
            field_name: Feed or entry field being processed
            **kwargs: Additional arguments for RssDigestError
        """
        context = kwargs.get("context", {})
        if field_name:
            context["field_name"] = field_name

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONTENT_INVALID),
            context=context,
            user_message=kwargs.get("user_message", "Content processing failed"),
            recoverable=kwargs.get("recoverable", True),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message", "recoverable"]
            },
        )


class ValidationError(RssDigestError):
    """Data validation errors."""

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        """Initialize validation error.

        Args:
            message: Error message
            field_name: Field name that failed validation
            **kwargs: Additional arguments for RssDigestError
        """
        context = kwargs.get("context", {})
        if field_name:
            context["field_name"] = field_name

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.VALIDATION_INVALID_FORMAT),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Invalid {field_name or 'input'}: {message}"
            ),
            recoverable=kwargs.get("recoverable", False),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message", "recoverable"]
            },
        )


# Specific pipeline exception types


class FeedFetchError(FeedError):
    """The feed source could not be opened."""

    pass


class FeedParseError(FeedError):
    """The fetched document could not be normalized into a feed."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_PARSE_ERROR)
        super().__init__(message, feed_url=feed_url, **kwargs)


class ContentConversionError(ProcessingError):
    """A text field could not be converted to document-safe text."""

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.CONTENT_CONVERSION_FAILED)
        super().__init__(message, field_name=field_name, **kwargs)


class DateResolutionError(ProcessingError):
    """A date field is absent or unparsable."""

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.DATE_UNRESOLVED)
        super().__init__(message, field_name=field_name, **kwargs)


class DocumentWriteError(RssDigestError):
    """The rendered document could not be written to its output path."""

    def __init__(self, message: str, output_path: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if output_path:
            context["output_path"] = output_path

        super().__init__(
            message=message,
            error_code=kwargs.pop("error_code", ErrorCode.DOCUMENT_WRITE_FAILED),
            context=context,
            user_message=kwargs.pop("user_message", f"Cannot write document: {message}"),
            **kwargs,
        )
