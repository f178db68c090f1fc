"""
Time utilities for the Team Tasks application.

Single source of truth for "now" so every timestamp written by the API is
timezone-aware UTC.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Get current UTC time.

    Returns:
        timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)
