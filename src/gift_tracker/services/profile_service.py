"""Profile Service - per-user settings consulted by the reminder dispatcher.

This module provides CRUD operations for profiles. A profile's id is the
user id that recipients and ledger entries point at; deleting a profile
cascades to everything the user owns.

All functions accept an optional session for transactional atomicity.
Without one they open their own session_scope().

Example Usage:
    >>> from gift_tracker.services.profile_service import create_profile
    >>> profile = create_profile("ann@example.com", display_name="Ann")
    >>> profile.notifications_enabled
    True
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from gift_tracker.models import Profile
from gift_tracker.services.database import session_scope
from gift_tracker.services.exceptions import (
    DatabaseError,
    ProfileEmailExists,
    ProfileNotFound,
    ValidationError,
)
from gift_tracker.utils.validators import validate_email


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def create_profile(
    email: str,
    display_name: Optional[str] = None,
    notifications_enabled: bool = True,
    session: Optional[Session] = None,
) -> Profile:
    """Create a new profile.

    Args:
        email: Address reminders are sent to (stored lowercased)
        display_name: Optional display name
        notifications_enabled: Whether reminder emails are wanted
        session: Optional database session for transactional atomicity

    Returns:
        Created Profile instance

    Raises:
        ValidationError: If the email is malformed
        ProfileEmailExists: If another profile already uses the email
        DatabaseError: If database operation fails
    """
    is_valid, error = validate_email(email)
    if not is_valid:
        raise ValidationError([error])

    try:
        if session is not None:
            return _create_profile_impl(email, display_name, notifications_enabled, session)
        with session_scope() as session:
            return _create_profile_impl(email, display_name, notifications_enabled, session)
    except IntegrityError as e:
        raise ProfileEmailExists(_normalize_email(email)) from e
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to create profile: {str(e)}", e)


def _create_profile_impl(
    email: str,
    display_name: Optional[str],
    notifications_enabled: bool,
    session: Session,
) -> Profile:
    email = _normalize_email(email)
    if session.query(Profile).filter(Profile.email == email).first():
        raise ProfileEmailExists(email)

    profile = Profile(
        email=email,
        display_name=display_name.strip() if display_name else None,
        notifications_enabled=bool(notifications_enabled),
    )
    session.add(profile)
    session.flush()
    return profile


def get_profile(profile_id: int, session: Optional[Session] = None) -> Optional[Profile]:
    """Get a profile by ID.

    Args:
        profile_id: Profile (user) ID
        session: Optional database session

    Returns:
        Profile instance, or None if no profile has that ID

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return session.get(Profile, profile_id)
        with session_scope() as session:
            return session.get(Profile, profile_id)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get profile: {str(e)}", e)


def get_profile_by_email(email: str, session: Optional[Session] = None) -> Optional[Profile]:
    """Get a profile by email address (case-insensitive)."""
    try:
        if session is not None:
            return _get_profile_by_email_impl(email, session)
        with session_scope() as session:
            return _get_profile_by_email_impl(email, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get profile by email: {str(e)}", e)


def _get_profile_by_email_impl(email: str, session: Session) -> Optional[Profile]:
    return session.query(Profile).filter(Profile.email == _normalize_email(email)).first()


def update_profile(
    profile_id: int, data: Dict[str, Any], session: Optional[Session] = None
) -> Profile:
    """Update profile fields.

    Args:
        profile_id: Profile ID to update
        data: Any of email, display_name, notifications_enabled
        session: Optional database session

    Returns:
        Updated Profile instance

    Raises:
        ProfileNotFound: If profile not found
        ValidationError: If the new email is malformed
        ProfileEmailExists: If the new email belongs to another profile
        DatabaseError: If database operation fails
    """
    if "email" in data:
        is_valid, error = validate_email(data["email"])
        if not is_valid:
            raise ValidationError([error])

    try:
        if session is not None:
            return _update_profile_impl(profile_id, data, session)
        with session_scope() as session:
            return _update_profile_impl(profile_id, data, session)
    except IntegrityError as e:
        raise ProfileEmailExists(_normalize_email(data.get("email", ""))) from e
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update profile: {str(e)}", e)


def _update_profile_impl(profile_id: int, data: Dict[str, Any], session: Session) -> Profile:
    profile = session.get(Profile, profile_id)
    if profile is None:
        raise ProfileNotFound(profile_id)

    updates = {}
    if "email" in data:
        email = _normalize_email(data["email"])
        other = session.query(Profile).filter(Profile.email == email, Profile.id != profile_id)
        if other.first():
            raise ProfileEmailExists(email)
        updates["email"] = email
    if "display_name" in data:
        updates["display_name"] = data["display_name"].strip() if data["display_name"] else None
    if "notifications_enabled" in data:
        updates["notifications_enabled"] = bool(data["notifications_enabled"])

    profile.update_from_dict(updates)
    session.flush()
    return profile


def set_notifications_enabled(
    profile_id: int, enabled: bool, session: Optional[Session] = None
) -> Profile:
    """Turn birthday reminder emails on or off for a user."""
    return update_profile(profile_id, {"notifications_enabled": enabled}, session=session)


def delete_profile(profile_id: int, session: Optional[Session] = None) -> bool:
    """Delete a profile together with its recipients, gift ideas and ledger entries.

    Raises:
        ProfileNotFound: If profile not found
        DatabaseError: If database operation fails
    """
    try:
        if session is not None:
            return _delete_profile_impl(profile_id, session)
        with session_scope() as session:
            return _delete_profile_impl(profile_id, session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete profile: {str(e)}", e)


def _delete_profile_impl(profile_id: int, session: Session) -> bool:
    profile = session.get(Profile, profile_id)
    if profile is None:
        raise ProfileNotFound(profile_id)
    session.delete(profile)
    session.flush()
    return True
