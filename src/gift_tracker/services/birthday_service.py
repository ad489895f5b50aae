"""
Birthday Service - Date arithmetic for recurring birthdays.

This service provides pure, deterministic functions for:
- Next occurrence of a birthday on or after a reference date
- Days until that occurrence
- Age on a reference date
- Recipients whose birthday falls in a lookahead window

Nothing here touches the database or the clock except where `today` is
omitted, in which case the current date in the configured reference
timezone is used.

Leap-day policy:
    A February 29 birthday falls on February 28 in non-leap years. The
    same rule is used for days-until and for age, so a leap-day recipient
    turns a year older on the day their reminder countdown reaches zero.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple

from gift_tracker.utils.datetime_utils import to_date, today as current_day


@dataclass(frozen=True)
class UpcomingBirthday:
    """A recipient with a birthday inside the lookahead window."""

    recipient: Any
    days_until: int
    next_birthday: date
    turning_age: int


def _resolve_today(today: Optional[date]) -> date:
    return current_day() if today is None else to_date(today)


def occurrence_in_year(birthday: date, year: int) -> date:
    """
    Get the birthday's month/day in a given year.

    Args:
        birthday: Date of birth (the year is ignored)
        year: Calendar year of the occurrence

    Returns:
        The occurrence date; Feb 29 becomes Feb 28 when year is not a leap year
    """
    birthday = to_date(birthday)
    if birthday.month == 2 and birthday.day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return date(year, birthday.month, birthday.day)


def next_occurrence(birthday: date, today: Optional[date] = None) -> date:
    """
    Get the next occurrence of a birthday on or after today.

    Args:
        birthday: Date of birth
        today: Reference date (default: today in the reference timezone)

    Returns:
        This year's occurrence if it is today or later, otherwise next year's
    """
    today = _resolve_today(today)
    candidate = occurrence_in_year(birthday, today.year)
    if candidate < today:
        candidate = occurrence_in_year(birthday, today.year + 1)
    return candidate


def days_until_next_occurrence(birthday: date, today: Optional[date] = None) -> int:
    """
    Count whole days from today until the next birthday occurrence.

    Args:
        birthday: Date of birth
        today: Reference date (default: today in the reference timezone)

    Returns:
        Days until the next occurrence, 0 when today is the birthday.
        Always within [0, 366].

    Example:
        >>> days_until_next_occurrence(date(1990, 3, 15), date(2024, 3, 1))
        14
    """
    today = _resolve_today(today)
    return (next_occurrence(birthday, today) - today).days


def age(birthday: date, today: Optional[date] = None) -> int:
    """
    Whole years elapsed since birth on a reference date.

    One is subtracted while this year's occurrence is still ahead. Dates
    before the birthday itself give 0.

    Args:
        birthday: Date of birth
        today: Reference date (default: today in the reference timezone)

    Returns:
        Age in years
    """
    birthday = to_date(birthday)
    today = _resolve_today(today)
    years = today.year - birthday.year
    if today < occurrence_in_year(birthday, today.year):
        years -= 1
    return max(years, 0)


def get_next_birthday(birthday: date, today: Optional[date] = None) -> Tuple[date, int]:
    """
    Get the next occurrence together with the days until it.

    Returns:
        Tuple of (next_birthday, days_until)
    """
    today = _resolve_today(today)
    upcoming_date = next_occurrence(birthday, today)
    return upcoming_date, (upcoming_date - today).days


def is_birthday_today(birthday: date, today: Optional[date] = None) -> bool:
    """Check whether the birthday occurs on the reference date."""
    return days_until_next_occurrence(birthday, today) == 0


def upcoming(
    recipients: Iterable[Any],
    today: Optional[date] = None,
    window_days: int = 60,
) -> List[UpcomingBirthday]:
    """
    Select recipients whose birthday is within the lookahead window.

    Args:
        recipients: Objects with a `birthday` attribute (date or ISO string)
        today: Reference date (default: today in the reference timezone)
        window_days: Inclusive lookahead in days; 0 means today only

    Returns:
        UpcomingBirthday entries with days_until in [0, window_days],
        sorted ascending by days_until. Ties keep their input order.

    Raises:
        ValueError: If window_days is negative
    """
    if window_days < 0:
        raise ValueError(f"window_days must be zero or greater, got {window_days}")

    today = _resolve_today(today)
    results = []
    for recipient in recipients:
        next_birthday, days_until = get_next_birthday(recipient.birthday, today)
        if days_until > window_days:
            continue
        results.append(
            UpcomingBirthday(
                recipient=recipient,
                days_until=days_until,
                next_birthday=next_birthday,
                turning_age=age(recipient.birthday, next_birthday),
            )
        )

    # sorted() is stable, so equal days keep input order
    return sorted(results, key=lambda entry: entry.days_until)

