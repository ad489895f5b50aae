"""
Input validation functions for the Gift Tracker application.

This module provides validation functions for recipient, gift idea and
profile inputs:
- String validation (required fields, length limits)
- Date validation (birthday not in the future)
- Numeric validation (non-negative cost)
- Category validation (relationship)
- Email address format

Each validator returns a (is_valid, error_message) tuple; the services
collect the messages and raise ValidationError with the full list.
"""

import re
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    ERROR_FUTURE_DATE,
    ERROR_INVALID_CATEGORY,
    ERROR_INVALID_DATE,
    ERROR_INVALID_EMAIL,
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_TEXT,
    ERROR_REQUIRED_FIELD,
    MAX_COST,
    MAX_EMAIL_LENGTH,
    MAX_GIFT_TITLE_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_TAGS_LENGTH,
    MIN_NAME_LENGTH,
    RELATIONSHIP_CATEGORIES,
)
from .datetime_utils import to_date

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    return True, ""


def validate_string_length(
    value: Optional[str], max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a string doesn't exceed maximum length.

    Args:
        value: The string value to validate
        max_length: Maximum allowed length
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is not None and not isinstance(value, str):
        return False, f"{field_name}: {ERROR_INVALID_TEXT}"
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_name(value: Optional[str]) -> Tuple[bool, str]:
    """Validate a recipient name: required, 2-50 characters."""
    is_valid, error = validate_required_string(value, "Name")
    if not is_valid:
        return is_valid, error
    if not isinstance(value, str):
        return False, f"Name: {ERROR_INVALID_TEXT}"
    if len(value.strip()) < MIN_NAME_LENGTH:
        return False, f"Name: Must be at least {MIN_NAME_LENGTH} characters"
    return validate_string_length(value.strip(), MAX_NAME_LENGTH, "Name")


def validate_birthday(value: Any, today: Optional[date] = None) -> Tuple[bool, str]:
    """
    Validate a birthday: required, a real date, not in the future.

    Args:
        value: date, datetime or ISO string
        today: Reference date (default: today in the configured timezone)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or value == "":
        return False, f"Birthday: {ERROR_REQUIRED_FIELD}"
    try:
        birthday = to_date(value)
    except (TypeError, ValueError):
        return False, f"Birthday: {ERROR_INVALID_DATE}"

    if today is None:
        from .datetime_utils import today as current_day

        today = current_day()
    if birthday > today:
        return False, f"Birthday: {ERROR_FUTURE_DATE}"
    return True, ""


def validate_non_negative_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a non-negative number (>= 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        num_value = float(value)
        if num_value < 0:
            return False, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
        if num_value > MAX_COST:
            return False, f"{field_name}: Must be {MAX_COST} or less"
        return True, ""
    except (ValueError, TypeError):
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"


def validate_relationship(value: Any) -> Tuple[bool, str]:
    """Validate that a relationship is one of the known categories."""
    if value is None:
        return True, ""
    label = str(getattr(value, "value", value)).strip().lower()
    if label not in [category.lower() for category in RELATIONSHIP_CATEGORIES]:
        return False, f"Relationship: {ERROR_INVALID_CATEGORY}"
    return True, ""


def validate_email(value: Optional[str]) -> Tuple[bool, str]:
    """Validate an email address (format and length only)."""
    is_valid, error = validate_required_string(value, "Email")
    if not is_valid:
        return is_valid, error
    if not isinstance(value, str):
        return False, f"Email: {ERROR_INVALID_TEXT}"
    value = value.strip()
    if len(value) > MAX_EMAIL_LENGTH or not _EMAIL_PATTERN.match(value):
        return False, f"Email: {ERROR_INVALID_EMAIL}"
    return True, ""


def _collect(results: List[Tuple[bool, str]]) -> List[str]:
    return [error for is_valid, error in results if not is_valid]


def validate_recipient_data(
    data: Dict[str, Any], today: Optional[date] = None, partial: bool = False
) -> List[str]:
    """
    Validate recipient fields.

    Args:
        data: Recipient fields (name, birthday, relationship, tags, notes)
        today: Reference date for the future-birthday check
        partial: If True, only validate the fields present in data

    Returns:
        List of error messages (empty when valid)
    """
    results = []
    if not partial or "name" in data:
        results.append(validate_name(data.get("name")))
    if not partial or "birthday" in data:
        results.append(validate_birthday(data.get("birthday"), today))
    if "relationship" in data:
        results.append(validate_relationship(data.get("relationship")))
    results.append(validate_string_length(data.get("tags"), MAX_TAGS_LENGTH, "Tags"))
    results.append(validate_string_length(data.get("notes"), MAX_NOTES_LENGTH, "Notes"))
    return _collect(results)


def validate_gift_idea_data(data: Dict[str, Any], partial: bool = False) -> List[str]:
    """
    Validate gift idea fields.

    Args:
        data: Gift idea fields (title, estimated_cost, notes)
        partial: If True, only validate the fields present in data

    Returns:
        List of error messages (empty when valid)
    """
    results = []
    if not partial or "title" in data:
        title = data.get("title")
        results.append(validate_required_string(title, "Title"))
        results.append(validate_string_length(title, MAX_GIFT_TITLE_LENGTH, "Title"))
    if data.get("estimated_cost") not in (None, ""):
        results.append(validate_non_negative_number(data["estimated_cost"], "Estimated cost"))
    results.append(validate_string_length(data.get("notes"), MAX_NOTES_LENGTH, "Notes"))
    return _collect(results)
