"""
Date and time utilities for MVP Arena.

This module provides helper functions for consistent datetime handling.
"""

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """
    Return current UTC time as ISO8601 with Z suffix.

    Returns:
        Current UTC time in ISO8601 format with 'Z' suffix.
        Example: "2025-10-29T14:30:00.123456Z"
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_utc_iso(iso_string: str) -> datetime:
    """
    Parse ISO8601 string with Z suffix to datetime object.

    SQLite defaults such as "2025-10-29 14:30:00Z" are accepted as well.

    Args:
        iso_string: ISO8601 string with 'Z' suffix.

    Returns:
        Datetime object in UTC timezone.
    """
    if iso_string.endswith("Z"):
        iso_string = iso_string[:-1] + "+00:00"

    dt = datetime.fromisoformat(iso_string.replace(" ", "T", 1))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
