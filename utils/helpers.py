"""
Helper Utility Module

This module provides various helper functions used throughout the Scrape Scheduler application.
"""

from datetime import datetime, timezone
from typing import Union
from urllib.parse import urlparse


def is_valid_url(url: str) -> bool:
    """
    Check if a URL is a valid absolute HTTP(S) URL.

    Args:
        url: The URL to validate

    Returns:
        bool: True if the URL is valid, False otherwise
    """
    if not url or not isinstance(url, str):
        return False
    try:
        result = urlparse(url.strip())
        return result.scheme in ("http", "https") and bool(result.netloc)
    except Exception:
        return False


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Resolve a datetime or ISO-8601 string to an aware UTC datetime.

    Naive values are taken to be UTC.

    Args:
        value: A datetime instance or an ISO-8601 string (a trailing 'Z' is accepted).

    Returns:
        datetime: The timestamp converted to UTC.

    Raises:
        ValueError: If the value cannot be resolved to a timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Cannot parse timestamp from {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """Serialize a datetime as an ISO-8601 UTC string."""
    return parse_timestamp(value).isoformat()


def truncate_text(text: str, max_length: int = 100, add_ellipsis: bool = True) -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: The text to truncate
        max_length: Maximum length
        add_ellipsis: Whether to add an ellipsis if text is truncated

    Returns:
        str: Truncated text
    """
    if not text or len(text) <= max_length:
        return text

    truncated = text[:max_length].rstrip()
    if add_ellipsis:
        truncated += "..."

    return truncated


def text_length(text: str) -> int:
    """
    Count the characters of text the way the posting platforms do.

    Platform limits are measured in UTF-16 code units, so a character outside
    the Basic Multilingual Plane (most emoji) counts as two.

    Args:
        text: The text to measure

    Returns:
        int: Number of UTF-16 code units
    """
    return len(text.encode('utf-16-le')) // 2


def cut_to_length(text: str, max_length: int) -> str:
    """
    Cut text so that text_length() of the result is at most max_length.

    A surrogate pair that would be split by the cut is dropped whole.
    """
    if text_length(text) <= max_length:
        return text
    return text.encode('utf-16-le')[:max_length * 2].decode('utf-16-le', errors='ignore')
