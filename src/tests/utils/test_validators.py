"""
Tests for input validation functions.

Tests cover:
- String validation (required, length)
- Name and birthday rules for recipients
- Non-negative cost validation
- Relationship category and email format
- Complete data validation (recipient, gift idea)
"""

from datetime import date

import pytest

from gift_tracker.models import RelationshipType
from gift_tracker.utils import validators
from gift_tracker.utils.constants import MAX_NAME_LENGTH, MAX_NOTES_LENGTH

TODAY = date(2024, 3, 1)


class TestStringValidation:
    """Test string validation functions."""

    def test_validate_required_string_valid(self):
        assert validators.validate_required_string("Value", "Field") == (True, "")

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_validate_required_string_missing(self, value):
        is_valid, error = validators.validate_required_string(value, "Field")
        assert not is_valid
        assert "required" in error.lower()

    def test_validate_string_length_exact_max(self):
        assert validators.validate_string_length("A" * 100, 100, "Field")[0]

    def test_validate_string_length_too_long(self):
        is_valid, error = validators.validate_string_length("A" * 101, 100, "Field")
        assert not is_valid
        assert "100 characters" in error

    @pytest.mark.parametrize("value", [123, 4.5, ["Mug"], {"a": 1}])
    def test_validate_string_length_non_string(self, value):
        is_valid, error = validators.validate_string_length(value, 100, "Title")
        assert not is_valid
        assert error.startswith("Title:")

    def test_validate_string_length_none_allowed(self):
        assert validators.validate_string_length(None, 100, "Notes") == (True, "")

    def test_non_string_name_and_email(self):
        assert not validators.validate_name(123)[0]
        assert not validators.validate_email(42)[0]


class TestNameValidation:
    """Test recipient name rules."""

    def test_two_characters_allowed(self):
        assert validators.validate_name("Al")[0]

    def test_one_character_rejected(self):
        assert not validators.validate_name("A")[0]

    def test_surrounding_whitespace_ignored(self):
        assert not validators.validate_name("  A  ")[0]

    def test_max_length(self):
        assert validators.validate_name("x" * MAX_NAME_LENGTH)[0]
        assert not validators.validate_name("x" * (MAX_NAME_LENGTH + 1))[0]


class TestBirthdayValidation:
    """Test birthday rules."""

    def test_today_allowed(self):
        assert validators.validate_birthday(TODAY, TODAY)[0]

    def test_future_rejected(self):
        is_valid, error = validators.validate_birthday(date(2024, 3, 2), TODAY)
        assert not is_valid
        assert "future" in error

    def test_iso_string_accepted(self):
        assert validators.validate_birthday("2000-02-29", TODAY)[0]

    @pytest.mark.parametrize("value", ["2023-02-29", "not a date", 12345])
    def test_invalid_dates(self, value):
        is_valid, error = validators.validate_birthday(value, TODAY)
        assert not is_valid
        assert "valid date" in error

    def test_missing(self):
        assert not validators.validate_birthday(None, TODAY)[0]


class TestNumericAndCategoryValidation:
    """Test cost, relationship and email validation."""

    @pytest.mark.parametrize("value", [0, "0", 12.5, "49.99"])
    def test_non_negative_valid(self, value):
        assert validators.validate_non_negative_number(value, "Cost")[0]

    @pytest.mark.parametrize("value", [-0.01, "abc", None])
    def test_non_negative_invalid(self, value):
        assert not validators.validate_non_negative_number(value, "Cost")[0]

    @pytest.mark.parametrize("value", ["Family", "friend", RelationshipType.COLLEAGUE, None])
    def test_relationship_valid(self, value):
        assert validators.validate_relationship(value)[0]

    def test_relationship_invalid(self):
        assert not validators.validate_relationship("Rival")[0]

    @pytest.mark.parametrize("value", ["ann@example.com", " bob@mail.example.org "])
    def test_email_valid(self, value):
        assert validators.validate_email(value)[0]

    @pytest.mark.parametrize("value", ["", "ann", "ann@", "@example.com", "a b@example.com"])
    def test_email_invalid(self, value):
        assert not validators.validate_email(value)[0]


class TestDataValidation:
    """Test complete record validation."""

    def test_valid_recipient(self):
        data = {"name": "Bob", "birthday": date(1990, 3, 15), "relationship": "Friend"}
        assert validators.validate_recipient_data(data, TODAY) == []

    def test_recipient_collects_all_errors(self):
        data = {"name": "", "birthday": date(2030, 1, 1), "notes": "n" * (MAX_NOTES_LENGTH + 1)}
        errors = validators.validate_recipient_data(data, TODAY)
        assert len(errors) == 3

    def test_partial_recipient_only_checks_present_fields(self):
        assert validators.validate_recipient_data({"notes": "hi"}, TODAY, partial=True) == []

    def test_gift_idea(self):
        assert validators.validate_gift_idea_data({"title": "Book", "estimated_cost": ""}) == []
        assert validators.validate_gift_idea_data({"title": "", "estimated_cost": -5})

    def test_gift_idea_non_string_title(self):
        errors = validators.validate_gift_idea_data({"title": 123})
        assert len(errors) == 1
        assert errors[0].startswith("Title:")

    def test_partial_gift_idea(self):
        assert validators.validate_gift_idea_data({"purchased": True}, partial=True) == []
