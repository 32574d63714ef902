"""
Time-related utilities for the application.

Index and share records store epoch milliseconds so that DynamoDB range
keys sort numerically. Error payloads carry ISO-8601 UTC timestamps.
"""

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return datetime.now(timezone.utc).isoformat()


def now_ms() -> int:
    """Return the current time as epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def to_epoch_ms(value: datetime) -> int:
    """Convert an aware or naive (assumed UTC) datetime to epoch milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def ms_to_iso(value: int) -> str:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
