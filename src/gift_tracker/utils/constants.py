"""
Constants for the Gift Tracker application.

This module defines all system-wide constants including:
- Application metadata
- Reminder thresholds and their phrasing
- Relationship categories
- Validation limits and error messages
"""

from typing import Dict, List, Tuple

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Gift Tracker"
APP_VERSION = "0.1.0"
DATABASE_VERSION = "1.0"
DATABASE_FILENAME = "gift_tracker.db"

# ============================================================================
# Birthday Reminders
# ============================================================================

# Days before a birthday at which a reminder email is due
NOTIFICATION_THRESHOLDS: Tuple[int, ...] = (14, 7, 1)

# Phrase used in the subject and body for each threshold
THRESHOLD_PHRASES: Dict[int, str] = {
    14: "14 days away",
    7: "one week away",
    1: "tomorrow",
}

# Ledger labels, kept compatible with the hosted notification_log table
THRESHOLD_LABELS: Dict[int, str] = {
    14: "14days",
    7: "7days",
    1: "1day",
}

# Dashboard lookahead
DEFAULT_UPCOMING_WINDOW_DAYS = 60

DEFAULT_TIMEZONE = "UTC"
DEFAULT_SMTP_PORT = 587
DEFAULT_SMTP_TIMEOUT = 10.0
DEFAULT_APP_URL = "http://localhost:5173"

# ============================================================================
# Relationships
# ============================================================================

RELATIONSHIP_CATEGORIES: List[str] = [
    "Family",
    "Friend",
    "Colleague",
    "Other",
]

# ============================================================================
# Validation Limits
# ============================================================================

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MAX_NOTES_LENGTH = 500
MAX_TAGS_LENGTH = 500
MAX_GIFT_TITLE_LENGTH = 200
MAX_EMAIL_LENGTH = 254
MAX_COST = 999999.99

# ============================================================================
# Error Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Please enter a valid number"
ERROR_INVALID_NON_NEGATIVE = "Value must be zero or greater"
ERROR_INVALID_CATEGORY = "Invalid category"
ERROR_INVALID_DATE = "Please enter a valid date"
ERROR_FUTURE_DATE = "Birthday cannot be in the future"
ERROR_INVALID_EMAIL = "Please enter a valid email address"
ERROR_INVALID_TEXT = "Please enter text"
