"""
Recipient model for tracking the people a user buys gifts for.

This module contains:
- Recipient: A person with a recurring birthday and a list of gift ideas
"""

from typing import List

from sqlalchemy import Column, Date, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel
from .enums import RelationshipType


class Recipient(BaseModel):
    """
    Recipient model representing a person whose birthday is tracked.

    Only the month and day of the birthday matter for reminders; the year
    is used for age only.

    Attributes:
        user_id: Owning profile (CASCADE delete)
        name: Display name (e.g., "Aunt May")
        birthday: Date of birth
        relationship_type: Family, Friend, Colleague or Other
        tags: Comma-delimited free text (e.g., "books, coffee")
        notes: Additional notes (sizes, allergies, etc.)

    Relationships:
        user: Owning Profile
        gift_ideas: Gift ideas for this recipient
    """

    __tablename__ = "recipients"

    user_id = Column(
        Integer,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(50), nullable=False, index=True)
    birthday = Column(Date, nullable=False)
    relationship_type = Column(
        Enum(RelationshipType, values_callable=lambda members: [m.value for m in members]),
        nullable=False,
        default=RelationshipType.OTHER,
    )
    tags = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    user = relationship("Profile", back_populates="recipients")
    gift_ideas = relationship(
        "GiftIdea",
        back_populates="recipient",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="GiftIdea.id",
    )

    __table_args__ = (
        Index("idx_recipient_user_name", "user_id", "name"),
    )

    @property
    def tag_list(self) -> List[str]:
        """Tags split on commas, trimmed, empties dropped."""
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]

    def __repr__(self) -> str:
        """String representation of recipient."""
        return f"Recipient(id={self.id}, name='{self.name}', birthday={self.birthday})"

    def to_dict(self, include_relationships: bool = False) -> dict:
        """
        Convert recipient to dictionary.

        Args:
            include_relationships: If True, include gift ideas

        Returns:
            Dictionary representation
        """
        result = super().to_dict(include_relationships)
        result["tag_list"] = self.tag_list
        return result
