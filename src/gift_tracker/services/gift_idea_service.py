"""
Gift Idea Service - Business logic for gift ideas attached to recipients.

This service provides:
- Gift idea CRUD operations
- Purchased toggle
- Per-recipient summary used by the recipient page and reminder emails
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gift_tracker.models import GiftIdea, Recipient
from gift_tracker.services.database import session_scope
from gift_tracker.services.exceptions import (
    DatabaseError,
    GiftIdeaNotFound,
    RecipientNotFound,
    ValidationError,
)
from gift_tracker.utils.validators import validate_gift_idea_data


def _to_cost(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation:
        raise ValidationError([f"Estimated cost: invalid amount '{value}'"])


def _prepare_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    fields = {}
    if "title" in data:
        fields["title"] = data["title"].strip()
    if "estimated_cost" in data:
        fields["estimated_cost"] = _to_cost(data["estimated_cost"])
    if "purchased" in data:
        fields["purchased"] = bool(data["purchased"])
    if "notes" in data:
        notes = (data["notes"] or "").strip()
        fields["notes"] = notes or None
    return fields


def create_gift_idea(
    recipient_id: int, data: Dict[str, Any], session: Optional[Session] = None
) -> GiftIdea:
    """
    Create a gift idea for a recipient.

    Args:
        recipient_id: Recipient the idea belongs to
        data: Dictionary with title and optional estimated_cost, purchased, notes
        session: Optional database session

    Returns:
        Created GiftIdea instance

    Raises:
        ValidationError: If data validation fails
        RecipientNotFound: If the recipient does not exist
        DatabaseError: If database operation fails
    """
    errors = validate_gift_idea_data(data)
    if errors:
        raise ValidationError(errors)

    try:
        if session is not None:
            return _create_gift_idea_impl(recipient_id, data, session)
        with session_scope() as session:
            return _create_gift_idea_impl(recipient_id, data, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to create gift idea: {str(e)}", e)


def _create_gift_idea_impl(recipient_id: int, data: Dict[str, Any], session: Session) -> GiftIdea:
    if session.get(Recipient, recipient_id) is None:
        raise RecipientNotFound(recipient_id)

    fields = _prepare_fields(data)
    fields.setdefault("purchased", False)
    idea = GiftIdea(recipient_id=recipient_id, **fields)
    session.add(idea)
    session.flush()
    return idea


def get_gift_idea(gift_idea_id: int, session: Optional[Session] = None) -> GiftIdea:
    """
    Get a gift idea by ID.

    Raises:
        GiftIdeaNotFound: If gift idea not found
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _get_gift_idea_impl(gift_idea_id, session)
        with session_scope() as session:
            return _get_gift_idea_impl(gift_idea_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get gift idea: {str(e)}", e)


def _get_gift_idea_impl(gift_idea_id: int, session: Session) -> GiftIdea:
    idea = session.get(GiftIdea, gift_idea_id)
    if idea is None:
        raise GiftIdeaNotFound(gift_idea_id)
    return idea


def get_gift_ideas_for_recipient(
    recipient_id: int,
    purchased: Optional[bool] = None,
    session: Optional[Session] = None,
) -> List[GiftIdea]:
    """
    Get a recipient's gift ideas in creation order.

    Args:
        recipient_id: Recipient ID
        purchased: If given, only ideas with this purchased flag
        session: Optional database session

    Returns:
        List of GiftIdea instances (empty when the recipient has none)

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _get_gift_ideas_impl(recipient_id, purchased, session)
        with session_scope() as session:
            return _get_gift_ideas_impl(recipient_id, purchased, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get gift ideas: {str(e)}", e)


def _get_gift_ideas_impl(
    recipient_id: int, purchased: Optional[bool], session: Session
) -> List[GiftIdea]:
    query = session.query(GiftIdea).filter(GiftIdea.recipient_id == recipient_id)
    if purchased is not None:
        query = query.filter(GiftIdea.purchased == purchased)
    return query.order_by(GiftIdea.id).all()


def update_gift_idea(
    gift_idea_id: int, data: Dict[str, Any], session: Optional[Session] = None
) -> GiftIdea:
    """
    Update a gift idea. Only the fields present in data are changed.

    Raises:
        GiftIdeaNotFound: If gift idea not found
        ValidationError: If data validation fails
        DatabaseError: If database operation fails
    """
    errors = validate_gift_idea_data(data, partial=True)
    if errors:
        raise ValidationError(errors)

    try:
        if session is not None:
            return _update_gift_idea_impl(gift_idea_id, data, session)
        with session_scope() as session:
            return _update_gift_idea_impl(gift_idea_id, data, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update gift idea: {str(e)}", e)


def _update_gift_idea_impl(gift_idea_id: int, data: Dict[str, Any], session: Session) -> GiftIdea:
    idea = _get_gift_idea_impl(gift_idea_id, session)
    idea.update_from_dict(_prepare_fields(data))
    session.flush()
    return idea


def toggle_purchased(gift_idea_id: int, session: Optional[Session] = None) -> GiftIdea:
    """
    Flip a gift idea's purchased flag.

    Returns:
        The updated GiftIdea

    Raises:
        GiftIdeaNotFound: If gift idea not found
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _toggle_purchased_impl(gift_idea_id, session)
        with session_scope() as session:
            return _toggle_purchased_impl(gift_idea_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to toggle gift idea: {str(e)}", e)


def _toggle_purchased_impl(gift_idea_id: int, session: Session) -> GiftIdea:
    idea = _get_gift_idea_impl(gift_idea_id, session)
    idea.update_from_dict({"purchased": not idea.purchased})
    session.flush()
    return idea


def delete_gift_idea(gift_idea_id: int, session: Optional[Session] = None) -> bool:
    """
    Delete a gift idea.

    Raises:
        GiftIdeaNotFound: If gift idea not found
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _delete_gift_idea_impl(gift_idea_id, session)
        with session_scope() as session:
            return _delete_gift_idea_impl(gift_idea_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete gift idea: {str(e)}", e)


def _delete_gift_idea_impl(gift_idea_id: int, session: Session) -> bool:
    session.delete(_get_gift_idea_impl(gift_idea_id, session))
    session.flush()
    return True


def summarize_gift_ideas(ideas: List[GiftIdea]) -> Dict[str, Any]:
    """
    Summarize a list of gift ideas.

    Returns:
        Dictionary with total, purchased, unpurchased counts, the titles of
        unpurchased ideas and the estimated cost of the unpurchased ones
    """
    unpurchased = [idea for idea in ideas if not idea.purchased]
    remaining_cost = sum(
        (idea.estimated_cost for idea in unpurchased if idea.estimated_cost is not None),
        Decimal("0.00"),
    )
    return {
        "total": len(ideas),
        "purchased": len(ideas) - len(unpurchased),
        "unpurchased": len(unpurchased),
        "unpurchased_titles": [idea.title for idea in unpurchased],
        "estimated_remaining_cost": remaining_cost,
    }


def get_gift_summary(recipient_id: int) -> Dict[str, Any]:
    """
    Summarize a recipient's gift ideas.

    Raises:
        DatabaseError: If database operation fails
    """
    return summarize_gift_ideas(get_gift_ideas_for_recipient(recipient_id))
