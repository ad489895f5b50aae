"""Tests for the birthday date arithmetic.

Tests cover:
- Next occurrence and days until, including year wraparound
- Feb 29 birthdays in leap and non-leap years
- Age before, on and after the birthday
- Upcoming window filtering, ordering and tie stability
"""

from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from gift_tracker.services import birthday_service
from gift_tracker.services.birthday_service import (
    age,
    days_until_next_occurrence,
    get_next_birthday,
    is_birthday_today,
    next_occurrence,
    occurrence_in_year,
    upcoming,
)


def person(name, birthday):
    return SimpleNamespace(name=name, birthday=birthday)


class TestOccurrenceInYear:
    """Tests for occurrence_in_year."""

    def test_regular_birthday(self):
        assert occurrence_in_year(date(1990, 3, 15), 2024) == date(2024, 3, 15)

    def test_leap_day_in_leap_year(self):
        assert occurrence_in_year(date(2000, 2, 29), 2024) == date(2024, 2, 29)

    def test_leap_day_in_non_leap_year_is_feb_28(self):
        assert occurrence_in_year(date(2000, 2, 29), 2023) == date(2023, 2, 28)
        assert occurrence_in_year(date(2000, 2, 29), 2100) == date(2100, 2, 28)

    def test_accepts_iso_string(self):
        assert occurrence_in_year("1990-03-15", 2025) == date(2025, 3, 15)


class TestDaysUntilNextOccurrence:
    """Tests for days_until_next_occurrence and next_occurrence."""

    def test_fourteen_days_away(self):
        assert days_until_next_occurrence(date(1990, 3, 15), date(2024, 3, 1)) == 14

    def test_birthday_today_is_zero(self):
        assert days_until_next_occurrence(date(2000, 3, 1), date(2024, 3, 1)) == 0
        assert is_birthday_today(date(2000, 3, 1), date(2024, 3, 1))

    def test_birthday_yesterday_rolls_to_next_year(self):
        today = date(2024, 3, 16)
        assert next_occurrence(date(1990, 3, 15), today) == date(2025, 3, 15)
        assert days_until_next_occurrence(date(1990, 3, 15), today) == 364

    def test_year_wraparound(self):
        assert days_until_next_occurrence(date(1985, 1, 5), date(2024, 12, 30)) == 6

    def test_tomorrow(self):
        assert days_until_next_occurrence(date(1970, 1, 1), date(2023, 12, 31)) == 1

    def test_leap_day_birthday_non_leap_year(self):
        assert days_until_next_occurrence(date(2000, 2, 29), date(2023, 2, 1)) == 27
        assert is_birthday_today(date(2000, 2, 29), date(2023, 2, 28))

    def test_leap_day_birthday_leap_year(self):
        assert days_until_next_occurrence(date(2000, 2, 29), date(2024, 2, 1)) == 28
        assert days_until_next_occurrence(date(2000, 2, 29), date(2024, 2, 28)) == 1

    def test_leap_day_birthday_after_feb_in_year_before_leap_year(self):
        assert next_occurrence(date(2000, 2, 29), date(2023, 3, 1)) == date(2024, 2, 29)
        assert days_until_next_occurrence(date(2000, 2, 29), date(2023, 3, 1)) == 365

    def test_birthday_year_is_ignored(self):
        assert days_until_next_occurrence(date(2030, 3, 15), date(2024, 3, 1)) == 14

    def test_get_next_birthday_returns_date_and_days(self):
        assert get_next_birthday(date(1990, 3, 15), date(2024, 3, 1)) == (date(2024, 3, 15), 14)

    @pytest.mark.parametrize(
        "birthday",
        [date(1990, 1, 1), date(1988, 2, 28), date(2000, 2, 29), date(1975, 3, 1), date(1999, 12, 31)],
    )
    def test_range_and_zero_at_occurrence(self, birthday):
        """Result is within [0, 366] and is 0 on the occurrence it points at."""
        start = date(2023, 1, 1)
        for offset in range(0, 3 * 365 + 1, 3):
            today = start + timedelta(days=offset)
            days = days_until_next_occurrence(birthday, today)
            assert 0 <= days <= 366
            assert days_until_next_occurrence(birthday, today + timedelta(days=days)) == 0

    def test_defaults_to_current_day(self, monkeypatch):
        monkeypatch.setattr(birthday_service, "current_day", lambda: date(2024, 3, 1))
        assert days_until_next_occurrence(date(1990, 3, 15)) == 14


class TestAge:
    """Tests for age."""

    def test_day_before_birthday(self):
        assert age(date(1990, 3, 15), date(2024, 3, 14)) == 33

    def test_on_birthday(self):
        assert age(date(1990, 3, 15), date(2024, 3, 15)) == 34

    def test_after_birthday(self):
        assert age(date(1990, 3, 15), date(2024, 12, 31)) == 34

    def test_earlier_month_later_day(self):
        assert age(date(1990, 5, 1), date(2024, 4, 30)) == 33

    def test_leap_day_birthday_increments_on_feb_28_in_non_leap_year(self):
        assert age(date(2000, 2, 29), date(2023, 2, 27)) == 22
        assert age(date(2000, 2, 29), date(2023, 2, 28)) == 23

    def test_leap_day_birthday_in_leap_year(self):
        assert age(date(2000, 2, 29), date(2024, 2, 28)) == 23
        assert age(date(2000, 2, 29), date(2024, 2, 29)) == 24

    def test_never_negative(self):
        assert age(date(2024, 6, 1), date(2024, 1, 1)) == 0

    @pytest.mark.parametrize("birthday", [date(1990, 3, 15), date(2000, 2, 29), date(1980, 1, 1)])
    def test_monotonic_and_increments_once_at_occurrence(self, birthday):
        today = date(2022, 1, 1)
        previous = age(birthday, today)
        while today < date(2026, 1, 1):
            today += timedelta(days=1)
            current = age(birthday, today)
            if days_until_next_occurrence(birthday, today) == 0:
                assert current == previous + 1
            else:
                assert current == previous
            previous = current


class TestUpcoming:
    """Tests for upcoming."""

    def test_filters_to_window_and_sorts(self):
        today = date(2024, 3, 1)
        people = [
            person("Far", date(1990, 8, 1)),
            person("Soon", date(1990, 3, 8)),
            person("Today", date(2000, 3, 1)),
            person("Later", date(1990, 4, 20)),
        ]

        result = upcoming(people, today=today, window_days=60)

        assert [entry.recipient.name for entry in result] == ["Today", "Soon", "Later"]
        assert [entry.days_until for entry in result] == [0, 7, 50]

    def test_window_is_inclusive(self):
        today = date(2024, 3, 1)
        people = [person("Edge", date(1990, 3, 15)), person("Past edge", date(1990, 3, 16))]

        result = upcoming(people, today=today, window_days=14)

        assert [entry.recipient.name for entry in result] == ["Edge"]

    def test_zero_window_is_today_only(self):
        today = date(2024, 3, 1)
        people = [person("Today", date(2000, 3, 1)), person("Tomorrow", date(2000, 3, 2))]

        result = upcoming(people, today=today, window_days=0)

        assert [entry.recipient.name for entry in result] == ["Today"]

    def test_ties_keep_input_order(self):
        today = date(2024, 3, 1)
        people = [
            person("Zed", date(1991, 3, 8)),
            person("Amy", date(1985, 3, 8)),
            person("Early", date(1990, 3, 2)),
            person("Mid", date(1970, 3, 8)),
        ]

        result = upcoming(people, today=today, window_days=30)

        assert [entry.recipient.name for entry in result] == ["Early", "Zed", "Amy", "Mid"]

    def test_idempotent(self):
        today = date(2024, 12, 20)
        people = [person(f"P{i}", date(1990, 1 + i % 12, 1 + i % 28)) for i in range(40)]

        first = upcoming(people, today=today, window_days=90)
        second = upcoming(people, today=today, window_days=90)

        assert first == second
        days = [entry.days_until for entry in first]
        assert days == sorted(days)

    def test_wraps_into_next_year(self):
        today = date(2024, 12, 20)
        result = upcoming([person("New Year", date(1990, 1, 2))], today=today, window_days=30)

        assert result[0].days_until == 13
        assert result[0].next_birthday == date(2025, 1, 2)
        assert result[0].turning_age == 35

    def test_turning_age(self):
        result = upcoming([person("Bob", date(1990, 3, 15))], today=date(2024, 3, 1), window_days=30)
        assert result[0].turning_age == 34

    def test_negative_window_raises(self):
        with pytest.raises(ValueError):
            upcoming([], today=date(2024, 3, 1), window_days=-1)

    def test_empty_input(self):
        assert upcoming([], today=date(2024, 3, 1), window_days=60) == []
