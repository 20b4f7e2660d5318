"""ISO 8601 datetime conversion utilities.

This module centralizes the conversions from Python datetime objects to
ISO 8601 strings and unix timestamps. Store timestamps and token claims
should go through these functions so the formats stay consistent.
"""

from datetime import datetime, UTC


def to_timestamp(dt: datetime) -> str:
    """Convert datetime to ISO 8601 UTC timestamp string."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat().replace("+00:00", "Z")


def now() -> str:
    """Get current UTC timestamp as ISO 8601 string."""
    return to_timestamp(datetime.now(UTC))


def now_unix() -> int:
    """Get current time as integer seconds since the epoch."""
    return int(datetime.now(UTC).timestamp())
