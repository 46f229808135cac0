"""Small shared helpers for timestamps and human-readable sizes."""

from datetime import datetime, timezone
from typing import Optional

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def utcnow() -> datetime:
    """Current time as an aware UTC datetime (microsecond resolution)."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    SQLite hands back naive datetimes for DateTime(timezone=True) columns;
    everything stored by this application is UTC, so naive values are
    tagged rather than converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_file_size(size_bytes: Optional[int]) -> str:
    """Render a byte count as e.g. ``1.5 MB``."""
    if not size_bytes:
        return "0 B"
    size = float(size_bytes)
    unit = 0
    while size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{size:.1f} {_SIZE_UNITS[unit]}"
