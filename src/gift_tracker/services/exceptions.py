"""Service layer exception classes for Gift Tracker.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── DatabaseError
    │   └── StoreUnavailable
    ├── ProfileNotFound
    ├── ProfileEmailExists
    ├── RecipientNotFound
    ├── GiftIdeaNotFound
    ├── EmailSendError
    └── LedgerWriteError

Skipped reminders (no profile, notifications disabled, already sent) are
outcomes recorded on DispatchResult, not exceptions.
"""


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class StoreUnavailable(DatabaseError):
    """Raised when the data store cannot be read at the start of a dispatch run.

    This is the only error that aborts a whole reminder run.
    """

    pass


class ProfileNotFound(ServiceError):
    """Raised when a profile cannot be found by ID.

    Example:
        >>> raise ProfileNotFound(7)
        ProfileNotFound: Profile with ID 7 not found
    """

    def __init__(self, profile_id: int):
        self.profile_id = profile_id
        super().__init__(f"Profile with ID {profile_id} not found")


class ProfileEmailExists(ServiceError):
    """Raised when creating or updating a profile to an email already in use."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A profile with email '{email}' already exists")


class RecipientNotFound(ServiceError):
    """Raised when a recipient cannot be found by ID."""

    def __init__(self, recipient_id: int):
        self.recipient_id = recipient_id
        super().__init__(f"Recipient with ID {recipient_id} not found")


class GiftIdeaNotFound(ServiceError):
    """Raised when a gift idea cannot be found by ID."""

    def __init__(self, gift_idea_id: int):
        self.gift_idea_id = gift_idea_id
        super().__init__(f"Gift idea with ID {gift_idea_id} not found")


class EmailSendError(ServiceError):
    """Raised when a reminder email could not be delivered.

    Recoverable: the dispatcher logs it and moves on to the next recipient.

    Args:
        to_address: Destination address
        reason: Description of the failure
        original_error: Underlying exception, if any
    """

    def __init__(self, to_address: str, reason: str, original_error: Exception = None):
        self.to_address = to_address
        self.reason = reason
        self.original_error = original_error
        super().__init__(f"Failed to send email to {to_address}: {reason}")


class LedgerWriteError(ServiceError):
    """Raised when a sent reminder could not be recorded in the ledger.

    The email already went out, so a later run on the same day may send
    it again.
    """

    def __init__(self, recipient_id: int, threshold_days: int, original_error: Exception = None):
        self.recipient_id = recipient_id
        self.threshold_days = threshold_days
        self.original_error = original_error
        super().__init__(
            f"Failed to record {threshold_days}-day reminder for recipient {recipient_id}"
        )
