"""
Utility functions and classes for Phone Companion.
"""

import datetime
from typing import Optional


class Colors:
    """ANSI color codes for terminal output."""

    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


def format_timestamp(timestamp_ms: int, now: Optional[datetime.datetime] = None) -> str:
    """
    Convert a phone timestamp to a short local-time label.

    Phone timestamps are milliseconds since the Unix epoch. Messages from
    today show the time of day, older ones the month and day.

    Args:
        timestamp_ms: Milliseconds since 1970-01-01 UTC.
        now: Reference "current" local time (defaults to now).

    Returns:
        "HH:MM", "Mon DD", or "Unknown" if the timestamp is out of range.
    """
    try:
        dt = datetime.datetime.fromtimestamp(timestamp_ms / 1000)
    except (OverflowError, OSError, ValueError):
        return "Unknown"

    if now is None:
        now = datetime.datetime.now()

    if dt.date() == now.date():
        return dt.strftime("%H:%M")
    return dt.strftime("%b %d")


def format_duration(ms: int) -> str:
    """
    Format a duration in milliseconds as m:ss.

    Examples:
        >>> format_duration(65_000)
        '1:05'
        >>> format_duration(-1)
        '0:00'
    """
    if ms <= 0:
        return "0:00"
    total_seconds = ms // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"
