"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across the reminder dispatcher and the
record services.

Usage:
    from gift_tracker.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="send_reminder",
        outcome="success",
        recipient_id=12,
        threshold_days=7,
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'gift_tracker.services' prefix.

    Example:
        >>> logger = get_service_logger(__name__)
        >>> logger.name
        'gift_tracker.services.notification_service'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"gift_tracker.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging
    and also appended to the message so plain-text handlers show it.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "dispatch_birthday_notifications")
        outcome: Outcome description (e.g., "success", "skipped_duplicate", "error")
        level: Log level (default: INFO). Use DEBUG for verbose/frequent logs.
        **context: Additional context fields (entity IDs, error details, etc.)
            Common fields:
            - recipient_id: Recipient being processed
            - user_id: Owning profile
            - threshold_days: 14, 7 or 1
            - error: Error message if outcome is "error"

    Example:
        >>> log_operation(
        ...     logger,
        ...     operation="send_reminder",
        ...     outcome="email_failed",
        ...     level=logging.WARNING,
        ...     recipient_id=12,
        ...     error="timed out",
        ... )
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    details = " ".join(f"{key}={value}" for key, value in context.items())
    message = f"{operation}: {outcome}"
    if details:
        message = f"{message} ({details})"
    logger.log(level, message, extra=extra)
