"""
Datetime utilities for consistent timezone handling across the application.
Slot labels are shop wall-clock times; record timestamps are UTC.
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from config import settings


def utc_now() -> datetime:
    """
    Get current UTC time as timezone-aware datetime.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def shop_now() -> datetime:
    """Current wall-clock time in the shop's timezone."""
    return datetime.now(ZoneInfo(settings.shop_timezone))


def shop_today() -> date:
    """Current calendar day in the shop's timezone."""
    return shop_now().date()


def parse_iso_datetime(iso_string: str) -> datetime:
    """
    Parse ISO format datetime string to timezone-aware datetime.
    Handles both 'Z' suffix and '+00:00' timezone formats.

    Args:
        iso_string: ISO format datetime string

    Returns:
        Timezone-aware datetime object

    Raises:
        ValueError: If datetime string cannot be parsed
    """
    normalized = iso_string.replace("Z", "+00:00")

    try:
        dt = datetime.fromisoformat(normalized)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    except ValueError as e:
        raise ValueError(f"Invalid datetime string: {iso_string}") from e


def to_iso_string(dt: datetime) -> str:
    """
    Convert datetime to ISO format string.

    Args:
        dt: Datetime object (timezone-aware or naive)

    Returns:
        ISO format string
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.isoformat()


def parse_iso_date(value: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` day.

    Raises:
        ValueError: If the string is not a calendar date
    """
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid date string: {value}") from e


def to_iso_date(day: date) -> str:
    """Format a day the way the tables store it."""
    return day.isoformat()


def format_long_date(day: Optional[date]) -> str:
    """``October 19, 2026``; ``N/A`` when missing."""
    if day is None:
        return "N/A"
    return f"{day.strftime('%B')} {day.day}, {day.year}"
