"""Services package - Business logic layer for Gift Tracker.

Architecture:
- Services: Stateless functions organized by domain (profile, recipient, gift idea)
- Transactions: Managed via session_scope() context manager; every service
  function also accepts an optional session for transactional composition
- Exceptions: Consistent error handling via the ServiceError hierarchy
- Validation: Input validation before database operations

Service Modules:
- birthday_service: Pure date arithmetic (next occurrence, days until, age, upcoming)
- profile_service: Per-user settings (email, notifications toggle)
- recipient_service: Recipient management and birthday dashboard queries
- gift_idea_service: Gift ideas per recipient
- notification_log_service: Reminder ledger (insert-if-absent)
- email_service: Reminder composition and delivery
- notification_service: Daily reminder dispatcher

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: Session management and database utilities
- logging_utils: Structured operation logging
"""

from . import (
    database,
    birthday_service,
    profile_service,
    recipient_service,
    gift_idea_service,
    notification_log_service,
    email_service,
    notification_service,
)

__all__ = [
    "database",
    "birthday_service",
    "profile_service",
    "recipient_service",
    "gift_idea_service",
    "notification_log_service",
    "email_service",
    "notification_service",
]
