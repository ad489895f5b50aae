"""
Profile model for per-user settings.

The profile id is the user id: recipients and ledger entries reference it,
and deleting a profile removes everything the user owns.
"""

from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship

from .base import BaseModel


class Profile(BaseModel):
    """
    Profile model holding a user's contact address and reminder preference.

    Attributes:
        email: Address reminder emails are sent to (unique)
        display_name: Optional name shown in greetings
        notifications_enabled: Whether birthday reminder emails are wanted

    Relationships:
        recipients: People this user tracks gifts for
        notification_logs: Reminder ledger entries for this user
    """

    __tablename__ = "profiles"

    email = Column(String(254), nullable=False, unique=True)
    display_name = Column(String(100), nullable=True)
    notifications_enabled = Column(Boolean, nullable=False, default=True)

    recipients = relationship(
        "Recipient",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    notification_logs = relationship(
        "NotificationLogEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        """String representation of profile."""
        return (
            f"Profile(id={self.id}, email='{self.email}', "
            f"notifications_enabled={self.notifications_enabled})"
        )
