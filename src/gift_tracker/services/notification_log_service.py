"""
Notification Log Service - the birthday reminder ledger.

The ledger records which (user, recipient, threshold, date) reminders have
already been sent. The unique constraint on that key lives in the
database, so record_sent() is an insert-if-absent: when two runs race for
the same key exactly one insert succeeds and the other gets False back.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gift_tracker.models import NotificationLogEntry
from gift_tracker.services.database import session_scope
from gift_tracker.services.exceptions import DatabaseError, LedgerWriteError
from gift_tracker.services.logging_utils import get_service_logger

logger = get_service_logger(__name__)


def has_been_sent(
    user_id: int,
    recipient_id: int,
    threshold_days: int,
    sent_date: date,
    session: Optional[Session] = None,
) -> bool:
    """
    Check whether a reminder with this key is already in the ledger.

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _find_entry(user_id, recipient_id, threshold_days, sent_date, session) is not None
        with session_scope() as session:
            return _find_entry(user_id, recipient_id, threshold_days, sent_date, session) is not None
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to read notification log: {str(e)}", e)


def _find_entry(
    user_id: int, recipient_id: int, threshold_days: int, sent_date: date, session: Session
) -> Optional[NotificationLogEntry]:
    return (
        session.query(NotificationLogEntry)
        .filter(
            NotificationLogEntry.user_id == user_id,
            NotificationLogEntry.recipient_id == recipient_id,
            NotificationLogEntry.threshold_days == threshold_days,
            NotificationLogEntry.sent_date == sent_date,
        )
        .first()
    )


def record_sent(
    user_id: int,
    recipient_id: int,
    threshold_days: int,
    sent_date: date,
) -> bool:
    """
    Record a sent reminder unless the same key is already recorded.

    Always runs in its own transaction so a conflict never rolls back
    unrelated work.

    Args:
        user_id: Profile the reminder went to
        recipient_id: Recipient the reminder was about
        threshold_days: 14, 7 or 1
        sent_date: Calendar day of the send

    Returns:
        True if this call inserted the entry, False if it already existed

    Raises:
        LedgerWriteError: If the entry could not be written for any other reason
    """
    try:
        with session_scope() as session:
            if _find_entry(user_id, recipient_id, threshold_days, sent_date, session):
                return False
            session.add(
                NotificationLogEntry(
                    user_id=user_id,
                    recipient_id=recipient_id,
                    threshold_days=threshold_days,
                    sent_date=sent_date,
                )
            )
            session.flush()
            return True
    except IntegrityError as e:
        # A concurrent run inserted the same key between our check and insert
        if has_been_sent(user_id, recipient_id, threshold_days, sent_date):
            logger.debug(
                f"Ledger key already present for recipient {recipient_id} "
                f"({threshold_days} days, {sent_date})"
            )
            return False
        raise LedgerWriteError(recipient_id, threshold_days, e) from e
    except SQLAlchemyError as e:
        raise LedgerWriteError(recipient_id, threshold_days, e) from e


def get_entries_for_recipient(
    recipient_id: int, session: Optional[Session] = None
) -> List[NotificationLogEntry]:
    """
    Get a recipient's ledger entries, newest first.

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _get_entries_impl(recipient_id, session)
        with session_scope() as session:
            return _get_entries_impl(recipient_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to read notification log: {str(e)}", e)


def _get_entries_impl(recipient_id: int, session: Session) -> List[NotificationLogEntry]:
    return (
        session.query(NotificationLogEntry)
        .filter(NotificationLogEntry.recipient_id == recipient_id)
        .order_by(NotificationLogEntry.sent_date.desc(), NotificationLogEntry.threshold_days)
        .all()
    )
