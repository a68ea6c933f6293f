"""
Datetime Utility Functions

ISO-8601 handling shared by the definition builder, the validator's
governance checks and report generation.
"""

import re
from datetime import UTC, datetime

# Review dates are stored as full timestamps: 2024-08-25T00:00:00.000Z
ISO_TIMESTAMP_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?(Z|[+-]\d{2}:\d{2})?$")

DAYS_PER_MONTH = 30


def utc_now_iso() -> str:
    """
    Current UTC time as an ISO-8601 string with millisecond precision and 'Z' suffix.

    Examples:
        >>> utc_now_iso()  # doctest: +SKIP
        '2026-02-10T10:00:00.000Z'
    """
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_iso_timestamp(value: str) -> bool:
    """
    Check that a string is a well-formed ISO-8601 timestamp.

    The shape must match and the date must exist (2024-02-30 is rejected).

    Examples:
        >>> is_iso_timestamp("2024-08-25T00:00:00.000Z")
        True
        >>> is_iso_timestamp("2024/08/25")
        False
    """
    if not isinstance(value, str) or not ISO_TIMESTAMP_PATTERN.match(value):
        return False
    try:
        parse_iso_timestamp(value)
    except ValueError:
        return False
    return True


def parse_iso_timestamp(timestamp_str: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into a timezone-aware datetime.

    Naive timestamps are assumed to be UTC.

    Args:
        timestamp_str: ISO timestamp string, optionally with 'Z' suffix

    Returns:
        datetime object (timezone-aware)

    Raises:
        ValueError: If timestamp format is invalid

    Examples:
        >>> parse_iso_timestamp("2026-02-10T10:00:00Z")
        datetime.datetime(2026, 2, 10, 10, 0, tzinfo=datetime.timezone.utc)
    """
    if not isinstance(timestamp_str, str):
        raise ValueError(f"Timestamp must be a string, got {type(timestamp_str)}")

    try:
        parsed = datetime.fromisoformat(timestamp_str.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"Invalid timestamp format: {timestamp_str}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def months_since(timestamp: datetime, now: datetime | None = None) -> float:
    """
    Elapsed time between a timestamp and now, in 30-day months.

    Args:
        timestamp: Start of the interval (timezone-aware)
        now: End of the interval (default: current UTC time)

    Returns:
        Fractional months; negative if timestamp lies in the future

    Examples:
        >>> start = datetime(2026, 1, 1, tzinfo=UTC)
        >>> months_since(start, datetime(2026, 1, 31, tzinfo=UTC))
        1.0
    """
    end = now or datetime.now(UTC)
    if end.tzinfo is None:
        end = end.replace(tzinfo=UTC)
    return (end - timestamp).total_seconds() / (DAYS_PER_MONTH * 24 * 60 * 60)
