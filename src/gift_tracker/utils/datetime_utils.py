"""Datetime utilities for timestamps and calendar dates.

Timestamps are stored as timezone-aware UTC datetimes. Calendar "today"
is resolved in the configured reference timezone so that the reminder
ledger is keyed the same way on every host.

Usage:
    from gift_tracker.utils.datetime_utils import utc_now, today

    created_at = Column(DateTime, default=utc_now)
    run_date = today()
"""

from datetime import date, datetime, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        Current UTC datetime with timezone info
    """
    return datetime.now(timezone.utc)


def today(tz_name: Optional[str] = None) -> date:
    """Return the current calendar date in the reference timezone.

    Args:
        tz_name: IANA timezone name. If None, uses the configured
                 notification timezone (UTC by default).

    Returns:
        Today's date in that timezone
    """
    if tz_name is None:
        from .config import get_config

        tz_name = get_config().notification_timezone
    return datetime.now(get_timezone(tz_name)).date()


def get_timezone(tz_name: str) -> tzinfo:
    """
    Resolve a timezone name. "UTC" needs no tz database.

    Raises:
        zoneinfo.ZoneInfoNotFoundError: If the name is unknown
    """
    if tz_name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(tz_name)


def to_date(value: Union[date, datetime, str]) -> date:
    """
    Coerce a date, datetime or ISO string (YYYY-MM-DD) to a date.

    Raises:
        ValueError: If the string is not an ISO date
        TypeError: If the value has an unsupported type
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Cannot convert {type(value).__name__} to date")


def format_date(value: Union[date, datetime, str]) -> str:
    """Format a date as MM/DD/YYYY for display."""
    d = to_date(value)
    return f"{d.month:02d}/{d.day:02d}/{d.year}"
