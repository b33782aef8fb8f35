"""
utils/time_utils.py

Purpose: Time helpers

- Upload timestamps (ISO-8601, UTC)
- Timestamp formatting
"""

from datetime import datetime, timezone
from typing import Optional

def utc_now() -> datetime:
    """
    Returns the current time as an aware UTC datetime.
    """
    return datetime.now(timezone.utc)

def utc_now_iso() -> str:
    """
    Returns the current UTC time as an ISO-8601 string with millisecond precision.

    Every timestamp has the same shape, so lexical order equals time order.
    """
    return utc_now().isoformat(timespec="milliseconds")

def format_timestamp(value: Optional[str], format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """
    Formats an ISO-8601 timestamp string for display.
    """
    if not value:
        return "N/A"
    try:
        return datetime.fromisoformat(value).strftime(format_str)
    except ValueError:
        return value
