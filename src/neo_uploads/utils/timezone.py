"""Timezone utilities for neo-uploads.

All timestamps persisted in upload metadata are UTC-aware and serialized
as ISO 8601 strings with a 'Z' suffix.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone awareness.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure datetime has UTC timezone.

    If datetime is naive (no timezone), assumes it's UTC and adds timezone info.
    If datetime has timezone, converts to UTC.

    Args:
        dt: Datetime to process

    Returns:
        UTC datetime with timezone info
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def to_utc_string(dt: datetime) -> str:
    """
    Convert datetime to UTC ISO format string.

    Args:
        dt: Datetime to convert

    Returns:
        ISO format UTC string (e.g., "2024-01-15T10:30:45.123456Z")
    """
    utc_dt = ensure_utc(dt)
    return utc_dt.isoformat().replace('+00:00', 'Z')


def from_utc_string(iso_string: str) -> datetime:
    """
    Parse UTC ISO format string to datetime.

    Args:
        iso_string: ISO format string

    Returns:
        UTC datetime with timezone info

    Raises:
        ValueError: If string format is invalid
    """
    try:
        if iso_string.endswith('Z'):
            iso_string = iso_string[:-1] + '+00:00'

        dt = datetime.fromisoformat(iso_string)
        return ensure_utc(dt)

    except ValueError as e:
        raise ValueError(f"Invalid ISO datetime format: {iso_string}") from e
