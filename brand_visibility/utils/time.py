"""
UTC timestamp utilities for Brand Visibility.

All timestamps MUST be in UTC with explicit timezone markers.

This module provides:
- utc_now(): Current time as timezone-aware datetime
- utc_timestamp(): ISO 8601 timestamp string with 'Z' suffix

Examples:
    >>> from brand_visibility.utils.time import utc_now, utc_timestamp
    >>> now = utc_now()
    >>> now.tzinfo
    datetime.timezone.utc
    >>> utc_timestamp()
    '2025-11-02T08:30:45Z'
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return current time in UTC with timezone info.

    Returns:
        datetime: Current UTC time with tzinfo=timezone.utc

    Note:
        NEVER use datetime.now() without timezone parameter.
        NEVER use datetime.utcnow() (deprecated, returns naive datetime).
    """
    return datetime.now(UTC)


def utc_timestamp(dt: datetime | None = None) -> str:
    """
    Return ISO 8601 timestamp string with 'Z' suffix.

    Format: YYYY-MM-DDTHH:MM:SSZ
    Used for log entries and the `analyzed_at` field of CLI reports.

    Args:
        dt: Optional timezone-aware datetime. If None, uses utc_now().

    Returns:
        str: ISO 8601 formatted timestamp in UTC

    Raises:
        ValueError: If dt is provided but is naive (missing timezone)

    Example:
        >>> from datetime import datetime, timezone
        >>> utc_timestamp(datetime(2025, 11, 2, 8, 30, 45, tzinfo=timezone.utc))
        '2025-11-02T08:30:45Z'
    """
    if dt is None:
        dt = utc_now()

    if dt.tzinfo is None:
        raise ValueError(
            "Datetime must be timezone-aware (use timezone.utc). "
            "Got naive datetime. Use utc_now() or ensure dt has tzinfo set."
        )

    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
