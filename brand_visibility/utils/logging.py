"""
Structured JSON logging for Brand Visibility.

Provides standardized logging with:
- JSON formatted output to stderr
- UTC timestamps with timezone info
- Structured context fields
- Component-based logger creation

All logs use Python's standard logging module with custom formatting.
Log level defaults to WARNING, use setup_logging(verbose=True) for DEBUG.
The analysis core logs skipped inputs and deduplication decisions at DEBUG,
so they only surface in verbose mode.

Examples:
    >>> from brand_visibility.utils.logging import setup_logging, get_logger
    >>> setup_logging(verbose=True)
    >>> logger = get_logger("config.loader")
    >>> logger.info("Config loaded", extra={"context": {"brands": 5}})

Only stderr is used (stdout reserved for user output).
"""

import json
import logging
import sys
from typing import Any

from brand_visibility.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Custom formatter that outputs logs as JSON with structured fields.

    Each log record is formatted as a JSON object with:
    - timestamp: ISO 8601 UTC timestamp
    - level: Log level (INFO, WARNING, ERROR, DEBUG)
    - component: Module/component name (from logger name)
    - message: Human-readable log message
    - context: Additional structured data (from 'context' in extra)
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON string.

        Args:
            record: LogRecord instance from Python logging

        Returns:
            JSON string representing the log entry
        """
        log_entry = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        # Add context if provided via extra={'context': {...}}
        if hasattr(record, "context") and isinstance(record.context, dict):
            log_entry["context"] = record.context

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # default=str keeps non-JSON context values (paths, sets) loggable
        return json.dumps(log_entry, default=str)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure structured JSON logging for the application.

    Sets up:
    - JSON formatter for structured output
    - stderr output (stdout reserved for user-facing content)
    - Log level: DEBUG if verbose=True, WARNING otherwise

    Args:
        verbose: If True, set log level to DEBUG. Otherwise, use WARNING.

    Example:
        >>> setup_logging(verbose=True)
        >>> logger = get_logger("my.component")
        >>> logger.debug("Debug message")  # Will appear in logs
    """
    level = logging.DEBUG if verbose else logging.WARNING

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers (prevents duplicate logs)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())

    root_logger.addHandler(handler)


def get_logger(component: str) -> logging.Logger:
    """
    Get a logger instance for a specific component.

    Args:
        component: Component name (e.g., "config.loader", "prompts.deduplicator")

    Returns:
        Logger instance configured for JSON output
    """
    return logging.getLogger(component)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
) -> None:
    """
    Log a message with structured context.

    Equivalent to logger.log(level, message, extra={'context': {...}})

    Args:
        logger: Logger instance (from get_logger)
        level: Log level (logging.INFO, logging.WARNING, etc.)
        message: Human-readable log message
        context: Optional dict with additional structured data

    Example:
        >>> logger = get_logger("prompts.deduplicator")
        >>> log_with_context(
        ...     logger,
        ...     logging.DEBUG,
        ...     "Prompt rejected",
        ...     context={"reason": "near_duplicate", "similarity": 0.91},
        ... )
    """
    extra = {"context": context} if context is not None else None
    logger.log(level, message, extra=extra)
