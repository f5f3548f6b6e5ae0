"""Utilities for datetime handling."""

from datetime import UTC, date, datetime


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_iso(dt: datetime) -> str:
    """Convert datetime to ISO format string."""
    return dt.isoformat()


def day_key(value: date | datetime) -> str:
    """Calendar day (YYYY-MM-DD) of a date or datetime."""
    return value.isoformat()[:10]


def backup_stamp(dt: datetime) -> str:
    """Timestamp safe for filenames, e.g. 2024-05-01-13-45-10."""
    return dt.strftime("%Y-%m-%d-%H-%M-%S")
