"""
Recipient Service - Business logic for gift recipients.

This service provides:
- Recipient CRUD scoped to the owning user
- Filtering by name, relationship and tag, with four sort orders
- Upcoming-birthday and dashboard queries built on birthday_service
- A cross-user listing used by the reminder dispatcher
"""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gift_tracker.models import GiftIdea, Profile, Recipient, RelationshipType
from gift_tracker.services import birthday_service
from gift_tracker.services.birthday_service import UpcomingBirthday
from gift_tracker.services.database import session_scope
from gift_tracker.services.exceptions import (
    DatabaseError,
    ProfileNotFound,
    RecipientNotFound,
    ValidationError,
)
from gift_tracker.utils.datetime_utils import to_date, today as current_day
from gift_tracker.utils.validators import validate_recipient_data

EDITABLE_FIELDS = ("name", "birthday", "relationship", "tags", "notes")
RECIPIENT_SORT_OPTIONS = ("name", "birthday", "relationship", "gift_ideas")


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _prepare_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert validated input into column values."""
    fields = {}
    if "name" in data:
        fields["name"] = data["name"].strip()
    if "birthday" in data:
        fields["birthday"] = to_date(data["birthday"])
    if "relationship" in data:
        fields["relationship_type"] = RelationshipType.from_value(data["relationship"])
    if "tags" in data:
        fields["tags"] = _clean_text(data["tags"])
    if "notes" in data:
        fields["notes"] = _clean_text(data["notes"])
    return fields


# ============================================================================
# Recipient CRUD Operations
# ============================================================================


def create_recipient(
    user_id: int,
    data: Dict[str, Any],
    today: Optional[date] = None,
    session: Optional[Session] = None,
) -> Recipient:
    """
    Create a new recipient for a user.

    Args:
        user_id: Owning profile ID
        data: Dictionary with name, birthday and optional relationship, tags, notes
        today: Reference date for the future-birthday check
        session: Optional database session

    Returns:
        Created Recipient instance

    Raises:
        ValidationError: If data validation fails
        ProfileNotFound: If the owning profile does not exist
        DatabaseError: If database operation fails
    """
    errors = validate_recipient_data(data, today=today)
    if errors:
        raise ValidationError(errors)

    try:
        if session is not None:
            return _create_recipient_impl(user_id, data, session)
        with session_scope() as session:
            return _create_recipient_impl(user_id, data, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to create recipient: {str(e)}", e)


def _create_recipient_impl(user_id: int, data: Dict[str, Any], session: Session) -> Recipient:
    if session.get(Profile, user_id) is None:
        raise ProfileNotFound(user_id)

    fields = _prepare_fields({key: data[key] for key in EDITABLE_FIELDS if key in data})
    fields.setdefault("relationship_type", RelationshipType.OTHER)

    recipient = Recipient(user_id=user_id, **fields)
    session.add(recipient)
    session.flush()
    return recipient


def get_recipient(
    recipient_id: int, user_id: Optional[int] = None, session: Optional[Session] = None
) -> Recipient:
    """
    Get a recipient by ID.

    Args:
        recipient_id: Recipient ID
        user_id: If given, the recipient must belong to this user
        session: Optional database session

    Returns:
        Recipient instance

    Raises:
        RecipientNotFound: If recipient not found (or owned by another user)
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _get_recipient_impl(recipient_id, user_id, session)
        with session_scope() as session:
            return _get_recipient_impl(recipient_id, user_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get recipient: {str(e)}", e)


def _get_recipient_impl(recipient_id: int, user_id: Optional[int], session: Session) -> Recipient:
    query = session.query(Recipient).filter(Recipient.id == recipient_id)
    if user_id is not None:
        query = query.filter(Recipient.user_id == user_id)
    recipient = query.first()
    if not recipient:
        raise RecipientNotFound(recipient_id)
    return recipient


def get_recipients_for_user(
    user_id: int,
    name_search: Optional[str] = None,
    relationship: Optional[Any] = None,
    tag: Optional[str] = None,
    sort_by: str = "name",
    session: Optional[Session] = None,
) -> List[Recipient]:
    """
    Get a user's recipients with optional filters.

    Args:
        user_id: Owning profile ID
        name_search: Optional name filter (partial, case-insensitive)
        relationship: Optional relationship filter (label or RelationshipType)
        tag: Optional tag filter (exact tag, case-insensitive)
        sort_by: One of RECIPIENT_SORT_OPTIONS. "birthday" orders by date of
                 birth, "gift_ideas" puts the recipients with the most ideas
                 first; ties fall back to name.
        session: Optional database session

    Returns:
        List of Recipient instances

    Raises:
        ValueError: If sort_by is not a known sort option
        DatabaseError: If database operation fails
    """
    if sort_by not in RECIPIENT_SORT_OPTIONS:
        raise ValueError(
            f"Unknown sort '{sort_by}', expected one of {', '.join(RECIPIENT_SORT_OPTIONS)}"
        )

    try:
        if session is not None:
            return _get_recipients_for_user_impl(
                user_id, name_search, relationship, tag, sort_by, session
            )
        with session_scope() as session:
            return _get_recipients_for_user_impl(
                user_id, name_search, relationship, tag, sort_by, session
            )
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get recipients: {str(e)}", e)


def _get_recipients_for_user_impl(
    user_id: int,
    name_search: Optional[str],
    relationship: Optional[Any],
    tag: Optional[str],
    sort_by: str,
    session: Session,
) -> List[Recipient]:
    query = session.query(Recipient).filter(Recipient.user_id == user_id)

    if name_search:
        query = query.filter(Recipient.name.ilike(f"%{name_search}%"))

    if relationship is not None:
        query = query.filter(
            Recipient.relationship_type == RelationshipType.from_value(relationship)
        )

    if tag:
        # Narrow in SQL, then match whole tags in Python
        query = query.filter(Recipient.tags.ilike(f"%{tag.strip()}%"))

    if sort_by == "birthday":
        query = query.order_by(Recipient.birthday, Recipient.name, Recipient.id)
    elif sort_by == "relationship":
        query = query.order_by(
            cast(Recipient.relationship_type, String), Recipient.name, Recipient.id
        )
    else:
        query = query.order_by(Recipient.name, Recipient.id)
    recipients = query.all()

    if tag:
        wanted = tag.strip().lower()
        recipients = [r for r in recipients if wanted in (t.lower() for t in r.tag_list)]

    if sort_by == "gift_ideas":
        counts = _get_gift_idea_counts_impl(user_id, session)
        # stable sort keeps name order among equal counts
        recipients.sort(key=lambda r: -counts.get(r.id, 0))

    return recipients


def get_gift_idea_counts(user_id: int, session: Optional[Session] = None) -> Dict[int, int]:
    """
    Count gift ideas per recipient for a user.

    Returns:
        Mapping of recipient ID to its number of gift ideas. Recipients
        without ideas are absent.

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _get_gift_idea_counts_impl(user_id, session)
        with session_scope() as session:
            return _get_gift_idea_counts_impl(user_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to count gift ideas: {str(e)}", e)


def _get_gift_idea_counts_impl(user_id: int, session: Session) -> Dict[int, int]:
    rows = (
        session.query(GiftIdea.recipient_id, func.count(GiftIdea.id))
        .join(Recipient, GiftIdea.recipient_id == Recipient.id)
        .filter(Recipient.user_id == user_id)
        .group_by(GiftIdea.recipient_id)
        .all()
    )
    return {recipient_id: count for recipient_id, count in rows}


def get_all_recipients(session: Optional[Session] = None) -> List[Recipient]:
    """
    Get every recipient across all users, ordered by ID.

    Used by the reminder dispatcher.

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return session.query(Recipient).order_by(Recipient.id).all()
        with session_scope() as session:
            return session.query(Recipient).order_by(Recipient.id).all()
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get recipients: {str(e)}", e)


def update_recipient(
    recipient_id: int,
    data: Dict[str, Any],
    user_id: Optional[int] = None,
    today: Optional[date] = None,
    session: Optional[Session] = None,
) -> Recipient:
    """
    Update an existing recipient.

    Only the fields present in data are changed.

    Args:
        recipient_id: Recipient ID to update
        data: Dictionary with updated recipient fields
        user_id: If given, the recipient must belong to this user
        today: Reference date for the future-birthday check
        session: Optional database session

    Returns:
        Updated Recipient instance

    Raises:
        RecipientNotFound: If recipient not found
        ValidationError: If data validation fails
        DatabaseError: If database operation fails
    """
    errors = validate_recipient_data(data, today=today, partial=True)
    if errors:
        raise ValidationError(errors)

    try:
        if session is not None:
            return _update_recipient_impl(recipient_id, data, user_id, session)
        with session_scope() as session:
            return _update_recipient_impl(recipient_id, data, user_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update recipient: {str(e)}", e)


def _update_recipient_impl(
    recipient_id: int, data: Dict[str, Any], user_id: Optional[int], session: Session
) -> Recipient:
    recipient = _get_recipient_impl(recipient_id, user_id, session)
    fields = _prepare_fields({key: data[key] for key in EDITABLE_FIELDS if key in data})
    recipient.update_from_dict(fields)
    session.flush()
    return recipient


def delete_recipient(
    recipient_id: int, user_id: Optional[int] = None, session: Optional[Session] = None
) -> bool:
    """
    Delete a recipient and its gift ideas.

    Args:
        recipient_id: Recipient ID to delete
        user_id: If given, the recipient must belong to this user
        session: Optional database session

    Returns:
        True if deleted successfully

    Raises:
        RecipientNotFound: If recipient not found
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _delete_recipient_impl(recipient_id, user_id, session)
        with session_scope() as session:
            return _delete_recipient_impl(recipient_id, user_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete recipient: {str(e)}", e)


def _delete_recipient_impl(recipient_id: int, user_id: Optional[int], session: Session) -> bool:
    recipient = _get_recipient_impl(recipient_id, user_id, session)
    session.delete(recipient)
    session.flush()
    return True


# ============================================================================
# Search Operations
# ============================================================================


def search_recipients(user_id: int, query: str) -> List[Recipient]:
    """
    Search a user's recipients by name, relationship or tags.

    Args:
        user_id: Owning profile ID
        query: Search string (partial match)

    Returns:
        List of matching Recipient instances

    Raises:
        DatabaseError: If database operation fails
    """
    pattern = f"%{query.strip()}%"
    try:
        with session_scope() as session:
            return (
                session.query(Recipient)
                .filter(
                    Recipient.user_id == user_id,
                    or_(
                        Recipient.name.ilike(pattern),
                        cast(Recipient.relationship_type, String).ilike(pattern),
                        Recipient.tags.ilike(pattern),
                    ),
                )
                .order_by(Recipient.name, Recipient.id)
                .all()
            )
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to search recipients: {str(e)}", e)


# ============================================================================
# Birthday Dashboard Operations
# ============================================================================


def get_upcoming_birthdays(
    user_id: int,
    window_days: Optional[int] = None,
    today: Optional[date] = None,
) -> List[UpcomingBirthday]:
    """
    Get a user's recipients with a birthday in the next window_days days.

    Args:
        user_id: Owning profile ID
        window_days: Lookahead in days (default: configured dashboard window)
        today: Reference date (default: today in the reference timezone)

    Returns:
        UpcomingBirthday entries sorted by days until the birthday

    Raises:
        DatabaseError: If database operation fails
    """
    if window_days is None:
        from gift_tracker.utils.config import get_config

        window_days = get_config().upcoming_window_days

    recipients = get_recipients_for_user(user_id)
    return birthday_service.upcoming(recipients, today=today, window_days=window_days)


def get_dashboard_summary(
    user_id: int,
    window_days: Optional[int] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Get the counts shown on a user's dashboard.

    Returns:
        Dictionary with:
        - total_recipients
        - upcoming_count: birthdays within window_days
        - birthdays_this_month: recipients born in the current calendar month
        - today: names of recipients whose birthday is today
        - total_gift_ideas / purchased_gift_ideas
        - upcoming: the UpcomingBirthday entries

    Raises:
        DatabaseError: If database operation fails
    """
    today = current_day() if today is None else to_date(today)
    upcoming = get_upcoming_birthdays(user_id, window_days=window_days, today=today)

    try:
        with session_scope() as session:
            birthdays = (
                session.query(Recipient.birthday).filter(Recipient.user_id == user_id).all()
            )
            ideas = (
                session.query(GiftIdea.purchased)
                .join(Recipient, GiftIdea.recipient_id == Recipient.id)
                .filter(Recipient.user_id == user_id)
                .all()
            )
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to build dashboard summary: {str(e)}", e)

    this_month = sum(1 for (birthday,) in birthdays if birthday.month == today.month)

    return {
        "total_recipients": len(birthdays),
        "upcoming_count": len(upcoming),
        "birthdays_this_month": this_month,
        "today": [entry.recipient.name for entry in upcoming if entry.days_until == 0],
        "total_gift_ideas": len(ideas),
        "purchased_gift_ideas": sum(1 for (purchased,) in ideas if purchased),
        "upcoming": upcoming,
    }
