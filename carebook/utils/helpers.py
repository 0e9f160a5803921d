"""Helper utility functions."""

from datetime import date, datetime, timezone
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from dateutil import parser as date_parser


def parse_appointment_date(value: Any) -> Optional[date]:
    """
    Parse an incoming appointment date and truncate it to the calendar day.

    Args:
        value: "2025-03-10", "2025-03-10T00:00:00.000Z", a date or a datetime

    Returns:
        The calendar date, or None if the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        return date_parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError):
        pass

    try:
        return date_parser.parse(value.strip()).date()
    except (ValueError, OverflowError):
        return None


def utc_now() -> datetime:
    """Current timezone-aware UTC time."""
    return datetime.now(timezone.utc)


def clinic_today(tz_name: str = "UTC") -> Callable[[], date]:
    """
    Build a clock returning today's date in the clinic's timezone.

    Args:
        tz_name: IANA timezone name; unknown names fall back to UTC

    Returns:
        Zero-argument callable
    """
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        tz = ZoneInfo("UTC")

    def _today() -> date:
        return datetime.now(tz).date()

    return _today


def clean_text(value: Any) -> str:
    """Strip a free-text field; non-strings become empty."""
    if not isinstance(value, str):
        return ""
    return value.strip()
