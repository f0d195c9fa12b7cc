"""
RssDigest Logging Configuration
===============================

Log records go to stderr, so stdout stays free for the rendered document.
An optional rotating log file receives one JSON object per record.

Component loggers live under the ``rssdigest.`` namespace and tag every
record with the component and, when known, the feed identifier.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER = "rssdigest"

# Context attached by component loggers and PerformanceLogger
CONTEXT_FIELDS = ("component", "feed_id", "feed_url", "duration_seconds", "success")

NOISY_LIBRARIES = ("urllib3", "requests", "feedparser", "charset_normalizer")


class StructuredFormatter(logging.Formatter):
    """JSON lines for log files."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL component [feed] message``, colored on a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"{record.levelname:8}"
        if self.color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        component = getattr(record, "component", record.name)
        feed_id = getattr(record, "feed_id", None)
        where = f"{component} [{feed_id}]" if feed_id else component

        formatted = f"{timestamp} {level} {where}: {record.getMessage()}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


class ComponentLogger(logging.LoggerAdapter):
    """Adds the component context to every record, keeping per-call extras."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs


def get_logger_for_component(
    component_name: str,
    feed_id: Optional[str] = None,
) -> ComponentLogger:
    """Get a logger adapter with component-specific context.

    Args:
        component_name: Name of the component (e.g., 'feed_parser', 'cli')
        feed_id: Identifier of the feed being processed (optional)

    Returns:
        Logger adapter with context
    """
    extra_context = {"component": component_name}
    if feed_id:
        extra_context["feed_id"] = feed_id

    return ComponentLogger(logging.getLogger(f"{ROOT_LOGGER}.{component_name}"), extra_context)


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the ``rssdigest`` logger for one run.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path of the rotating JSON log file (optional)
        enable_console: Whether to log to stderr
        max_file_size_mb: Size at which the log file is rotated
        backup_count: Number of rotated log files to keep

    Returns:
        The configured root application logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Reconfiguring replaces earlier handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ConsoleFormatter(color=sys.stderr.isatty()))
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


class PerformanceLogger:
    """Context manager for performance logging."""

    def __init__(self, logger: logging.LoggerAdapter, operation: str, **kwargs):
        """Initialize performance logger.

        Args:
            logger: Logger instance
            operation: Operation being timed
            **kwargs: Additional context for the operation
        """
        self.logger = logger
        self.operation = operation
        self.context = kwargs
        self.started: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self.started = time.monotonic()
        self.logger.debug(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.started is None:
            return

        duration = time.monotonic() - self.started
        context = {**self.context, "duration_seconds": round(duration, 3), "success": exc_type is None}

        if exc_type:
            self.logger.error(f"Failed {self.operation} in {duration:.3f}s", extra=context)
        else:
            self.logger.info(f"Completed {self.operation} in {duration:.3f}s", extra=context)
