"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .enums import RelationshipType
from .profile import Profile
from .recipient import Recipient
from .gift_idea import GiftIdea
from .notification_log import NotificationLogEntry

__all__ = [
    "Base",
    "BaseModel",
    "RelationshipType",
    "Profile",
    "Recipient",
    "GiftIdea",
    "NotificationLogEntry",
]
