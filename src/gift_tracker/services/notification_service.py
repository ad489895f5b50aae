"""
Notification Service - daily birthday reminder dispatcher.

One call to dispatch_birthday_notifications() is one reminder run. A
scheduler (cron, systemd timer, or a manual `gift-tracker send-reminders`)
calls it once a day. The run:

1. Loads every recipient across all users (failure aborts the run with
   StoreUnavailable)
2. Keeps recipients whose birthday is exactly 14, 7 or 1 days away
3. Skips users without a profile or with notifications turned off
4. Skips reminders already recorded in the ledger for today
5. Composes and sends the email, then records it in the ledger

Ordering is send-then-record. A crash between the two steps can repeat a
reminder on a later run the same day; a reminder is never recorded
without having been sent. Each recipient is processed on its own: a
failed send or store read is logged and counted, and the run continues.

The dispatcher keeps no state between runs. Everything that makes a
second run on the same day send nothing lives in the ledger.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from gift_tracker.services import (
    gift_idea_service,
    notification_log_service,
    profile_service,
    recipient_service,
)
from gift_tracker.services.birthday_service import days_until_next_occurrence
from gift_tracker.services.email_service import compose_reminder, get_email_sender
from gift_tracker.services.exceptions import (
    DatabaseError,
    EmailSendError,
    LedgerWriteError,
    StoreUnavailable,
)
from gift_tracker.services.logging_utils import get_service_logger, log_operation
from gift_tracker.utils.constants import NOTIFICATION_THRESHOLDS
from gift_tracker.utils.datetime_utils import today as current_day

logger = get_service_logger(__name__)

OPERATION = "send_birthday_reminder"


@dataclass(frozen=True)
class DueReminder:
    """A recipient whose birthday is exactly one reminder threshold away."""

    recipient: Any
    threshold_days: int


class DispatchResult:
    """Outcome of one reminder run."""

    def __init__(self, run_date: date, dry_run: bool = False):
        self.run_date = run_date
        self.dry_run = dry_run
        self.recipients_scanned = 0
        self.due = 0
        self.notifications_sent = 0
        self.skipped_no_profile = 0
        self.skipped_disabled = 0
        self.skipped_duplicate = 0
        self.failed = 0
        self.ledger_failures = 0
        self.sent: List[Dict[str, Any]] = []
        self.planned: List[Dict[str, Any]] = []
        self.errors: List[Dict[str, Any]] = []

    def add_sent(self, reminder: DueReminder, to_address: str):
        """Record a successful send."""
        self.notifications_sent += 1
        self.sent.append(_reminder_details(reminder, to_address))

    def add_planned(self, reminder: DueReminder, to_address: str):
        """Record a reminder that a dry run would have sent."""
        self.planned.append(_reminder_details(reminder, to_address))

    def add_failure(self, reminder: DueReminder, stage: str, error: str):
        """Record a per-recipient failure (send or store read)."""
        self.failed += 1
        self.errors.append(
            {
                "recipient_id": reminder.recipient.id,
                "threshold_days": reminder.threshold_days,
                "stage": stage,
                "message": error,
            }
        )

    def add_ledger_failure(self, reminder: DueReminder, error: str):
        """Record a sent reminder that could not be written to the ledger."""
        self.ledger_failures += 1
        self.errors.append(
            {
                "recipient_id": reminder.recipient.id,
                "threshold_days": reminder.threshold_days,
                "stage": "ledger",
                "message": error,
            }
        )

    @property
    def skipped(self) -> int:
        """Total expected skips (no profile, disabled, already sent)."""
        return self.skipped_no_profile + self.skipped_disabled + self.skipped_duplicate

    @property
    def success(self) -> bool:
        """True when no recipient failed and every send was recorded."""
        return self.failed == 0 and self.ledger_failures == 0

    def get_summary(self) -> str:
        """Human-readable summary of the run."""
        mode = " (dry run)" if self.dry_run else ""
        lines = [
            f"Birthday reminders for {self.run_date.isoformat()}{mode}",
            f"  Recipients scanned: {self.recipients_scanned}",
            f"  Reminders due: {self.due}",
        ]
        if self.dry_run:
            lines.append(f"  Would send: {len(self.planned)}")
        else:
            lines.append(f"  Sent: {self.notifications_sent}")
        lines.append(
            f"  Skipped: {self.skipped} "
            f"(no profile: {self.skipped_no_profile}, "
            f"disabled: {self.skipped_disabled}, "
            f"already sent: {self.skipped_duplicate})"
        )
        if self.failed:
            lines.append(f"  Failed: {self.failed}")
        if self.ledger_failures:
            lines.append(f"  Not recorded in ledger: {self.ledger_failures}")
        for error in self.errors:
            lines.append(
                f"    - recipient {error['recipient_id']} "
                f"({error['threshold_days']} days, {error['stage']}): {error['message']}"
            )
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Structured form of the result for callers and logs."""
        return {
            "run_date": self.run_date.isoformat(),
            "dry_run": self.dry_run,
            "success": self.success,
            "recipients_scanned": self.recipients_scanned,
            "due": self.due,
            "notifications_sent": self.notifications_sent,
            "skipped_no_profile": self.skipped_no_profile,
            "skipped_disabled": self.skipped_disabled,
            "skipped_duplicate": self.skipped_duplicate,
            "failed": self.failed,
            "ledger_failures": self.ledger_failures,
            "sent": list(self.sent),
            "planned": list(self.planned),
            "errors": list(self.errors),
        }


def _reminder_details(reminder: DueReminder, to_address: str) -> Dict[str, Any]:
    return {
        "recipient_id": reminder.recipient.id,
        "user_id": reminder.recipient.user_id,
        "recipient_name": reminder.recipient.name,
        "threshold_days": reminder.threshold_days,
        "to": to_address,
    }


def find_due_reminders(recipients: Iterable[Any], today: date) -> List[DueReminder]:
    """
    Select recipients whose birthday is exactly 14, 7 or 1 days away.

    Args:
        recipients: Objects with a `birthday` attribute
        today: Reference date

    Returns:
        DueReminder entries in input order
    """
    due = []
    for recipient in recipients:
        days_until = days_until_next_occurrence(recipient.birthday, today)
        if days_until in NOTIFICATION_THRESHOLDS:
            due.append(DueReminder(recipient=recipient, threshold_days=days_until))
    return due


def dispatch_birthday_notifications(
    today: Optional[date] = None,
    sender=None,
    dry_run: bool = False,
    app_url: Optional[str] = None,
) -> DispatchResult:
    """
    Run the daily birthday reminder pass over all users.

    Args:
        today: Run date (default: today in the reference timezone)
        sender: Email sender with send(to_address, message)
                (default: the configured sender)
        dry_run: If True, report what would be sent without sending
                 or writing the ledger
        app_url: Link used in emails (default: configured app URL)

    Returns:
        DispatchResult; notifications_sent counts successful sends

    Raises:
        StoreUnavailable: If recipients cannot be loaded
    """
    if today is None:
        today = current_day()
    if sender is None and not dry_run:
        sender = get_email_sender()
    if app_url is None:
        from gift_tracker.utils.config import get_config

        app_url = get_config().app_url

    result = DispatchResult(today, dry_run=dry_run)

    try:
        recipients = recipient_service.get_all_recipients()
    except DatabaseError as e:
        log_operation(
            logger,
            operation="dispatch_birthday_notifications",
            outcome="store_unavailable",
            level=logging.ERROR,
            run_date=today.isoformat(),
            error=str(e),
        )
        raise StoreUnavailable(f"Could not load recipients: {e}", e) from e

    result.recipients_scanned = len(recipients)
    due = find_due_reminders(recipients, today)
    result.due = len(due)

    logger.info(
        f"Reminder run for {today.isoformat()}: "
        f"{len(due)} of {len(recipients)} recipients at a reminder threshold"
    )

    for reminder in due:
        _process_reminder(reminder, today, sender, app_url, result)

    log_operation(
        logger,
        operation="dispatch_birthday_notifications",
        outcome="complete" if result.success else "completed_with_errors",
        level=logging.INFO if result.success else logging.WARNING,
        run_date=today.isoformat(),
        notifications_sent=result.notifications_sent,
        skipped=result.skipped,
        failed=result.failed,
        ledger_failures=result.ledger_failures,
    )
    return result


def _process_reminder(
    reminder: DueReminder,
    today: date,
    sender,
    app_url: str,
    result: DispatchResult,
) -> None:
    """Handle one due reminder; never raises for per-recipient problems."""
    recipient = reminder.recipient
    context = {
        "recipient_id": recipient.id,
        "user_id": recipient.user_id,
        "threshold_days": reminder.threshold_days,
    }

    try:
        profile = profile_service.get_profile(recipient.user_id)
    except DatabaseError as e:
        result.add_failure(reminder, "profile", str(e))
        log_operation(logger, OPERATION, "profile_read_failed", logging.ERROR, error=str(e), **context)
        return

    if profile is None:
        result.skipped_no_profile += 1
        log_operation(logger, OPERATION, "skipped_no_profile", logging.WARNING, **context)
        return

    if not profile.notifications_enabled:
        result.skipped_disabled += 1
        log_operation(logger, OPERATION, "skipped_disabled", logging.DEBUG, **context)
        return

    try:
        already_sent = notification_log_service.has_been_sent(
            recipient.user_id, recipient.id, reminder.threshold_days, today
        )
        ideas = [] if already_sent else gift_idea_service.get_gift_ideas_for_recipient(recipient.id)
    except DatabaseError as e:
        result.add_failure(reminder, "store", str(e))
        log_operation(logger, OPERATION, "store_read_failed", logging.ERROR, error=str(e), **context)
        return

    if already_sent:
        result.skipped_duplicate += 1
        log_operation(logger, OPERATION, "skipped_duplicate", logging.INFO, **context)
        return

    message = compose_reminder(recipient.name, reminder.threshold_days, ideas, app_url)

    if result.dry_run:
        result.add_planned(reminder, profile.email)
        log_operation(logger, OPERATION, "dry_run", logging.INFO, **context)
        return

    try:
        sender.send(profile.email, message)
    except EmailSendError as e:
        result.add_failure(reminder, "email", str(e))
        log_operation(logger, OPERATION, "email_failed", logging.ERROR, error=str(e), **context)
        return
    except Exception as e:
        logger.exception(f"Unexpected error sending reminder for recipient {recipient.id}")
        result.add_failure(reminder, "email", f"{e.__class__.__name__}: {e}")
        return

    result.add_sent(reminder, profile.email)

    try:
        inserted = notification_log_service.record_sent(
            recipient.user_id, recipient.id, reminder.threshold_days, today
        )
    except (LedgerWriteError, DatabaseError) as e:
        result.add_ledger_failure(reminder, str(e))
        log_operation(
            logger,
            OPERATION,
            "ledger_write_failed",
            logging.ERROR,
            error=str(e),
            note="reminder may be sent again on a later run today",
            **context,
        )
        return

    if not inserted:
        log_operation(
            logger,
            OPERATION,
            "duplicate_send",
            logging.WARNING,
            note="another run recorded this reminder first",
            **context,
        )
        return

    log_operation(logger, OPERATION, "success", **context)
