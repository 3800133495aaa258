"""Formatting utilities for icloud-snapshot."""

from datetime import datetime
from typing import Optional

# =============================================================================
# Timestamp formats
# =============================================================================

# Prefix of every output line, e.g. "18 Oct 26 14:03:59"
LOG_DATE_FORMAT: str = "%d %b %y %H:%M:%S"

# Name of a timecoded snapshot directory, e.g. "18-Oct-26_14_03_59"
TIMECODE_FORMAT: str = "%d-%b-%y_%H_%M_%S"


def format_date_stamp(date: Optional[datetime] = None) -> str:
    """Format a timestamp for the output line prefix.

    Args:
        date: Timestamp to format (defaults to now)

    Returns:
        Formatted timestamp (e.g., "05 Jan 25 10:30:00")
    """
    return (date or datetime.now()).strftime(LOG_DATE_FORMAT)


def format_timecode(date: Optional[datetime] = None) -> str:
    """Format a timestamp as a snapshot directory name.

    Examples:
        >>> format_timecode(datetime(2025, 1, 5, 10, 30, 0))
        '05-Jan-25_10_30_00'
    """
    return (date or datetime.now()).strftime(TIMECODE_FORMAT)


# =============================================================================
# Size and duration formatting
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_duration(seconds: float) -> str:
    """Format an elapsed time as hours, minutes and seconds.

    Examples:
        >>> format_duration(0)
        '0 seconds'
        >>> format_duration(65)
        '1 minute, 5 seconds'
        >>> format_duration(3600)
        '1 hour'
    """
    total = max(int(seconds), 0)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours:
        parts.append(_plural(hours, "hour"))
    if minutes:
        parts.append(_plural(minutes, "minute"))
    if secs or not parts:
        parts.append(_plural(secs, "second"))
    return ", ".join(parts)
