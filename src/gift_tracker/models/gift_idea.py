"""
GiftIdea model for gift ideas attached to a recipient.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class GiftIdea(BaseModel):
    """
    A gift idea for one recipient.

    Attributes:
        recipient_id: Foreign key to Recipient (CASCADE delete)
        title: Short description (e.g., "Hardcover cookbook")
        estimated_cost: Optional non-negative cost estimate
        purchased: Whether the gift has been bought
        notes: Where to buy, size, color, etc.
    """

    __tablename__ = "gift_ideas"

    recipient_id = Column(
        Integer,
        ForeignKey("recipients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(200), nullable=False)
    estimated_cost = Column(Numeric(10, 2), nullable=True)
    purchased = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)

    recipient = relationship("Recipient", back_populates="gift_ideas")

    __table_args__ = (
        CheckConstraint(
            "estimated_cost IS NULL OR estimated_cost >= 0",
            name="ck_gift_idea_cost_non_negative",
        ),
        Index("idx_gift_idea_recipient_purchased", "recipient_id", "purchased"),
    )

    def __repr__(self) -> str:
        """String representation."""
        status = "purchased" if self.purchased else "open"
        return f"GiftIdea(id={self.id}, title='{self.title}', {status})"
