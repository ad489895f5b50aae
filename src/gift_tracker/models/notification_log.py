"""
NotificationLogEntry model - the birthday reminder ledger.

One row records that the reminder for a threshold (14, 7 or 1 days out)
was sent to a user about a recipient on a given calendar day. The unique
constraint on (user_id, recipient_id, threshold_days, sent_date) is what
keeps repeated dispatcher runs from emailing twice.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from gift_tracker.utils.constants import THRESHOLD_LABELS


class NotificationLogEntry(BaseModel):
    """
    Ledger entry for a sent birthday reminder.

    Attributes:
        user_id: Profile that received the email (CASCADE delete)
        recipient_id: Recipient the reminder was about (CASCADE delete)
        threshold_days: 14, 7 or 1
        sent_date: Calendar day of the send, in the reference timezone
    """

    __tablename__ = "notification_log"

    user_id = Column(
        Integer,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    recipient_id = Column(
        Integer,
        ForeignKey("recipients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    threshold_days = Column(Integer, nullable=False)
    sent_date = Column(Date, nullable=False)

    user = relationship("Profile", back_populates="notification_logs")

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "recipient_id",
            "threshold_days",
            "sent_date",
            name="uq_notification_log_key",
        ),
        CheckConstraint(
            "threshold_days IN (1, 7, 14)",
            name="ck_notification_log_threshold",
        ),
        Index("idx_notification_log_sent_date", "sent_date"),
    )

    @property
    def notification_type(self) -> str:
        """Legacy label for the threshold ("14days", "7days", "1day")."""
        return THRESHOLD_LABELS.get(self.threshold_days, f"{self.threshold_days}days")

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"NotificationLogEntry(user_id={self.user_id}, recipient_id={self.recipient_id}, "
            f"type='{self.notification_type}', sent_date={self.sent_date})"
        )
