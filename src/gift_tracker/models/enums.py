"""
Enumerations for recipient records.

This module contains:
- RelationshipType: How a recipient is related to the user
"""

from enum import Enum


class RelationshipType(str, Enum):
    """
    Relationship category of a recipient.

    Values:
        FAMILY: Relatives
        FRIEND: Friends
        COLLEAGUE: Work contacts
        OTHER: Catch-all category; use tags for specifics
    """

    FAMILY = "Family"
    FRIEND = "Friend"
    COLLEAGUE = "Colleague"
    OTHER = "Other"

    @classmethod
    def from_value(cls, value) -> "RelationshipType":
        """
        Resolve a label ("Family", "family") or member to a RelationshipType.

        Raises:
            ValueError: If the value is not a known relationship
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.OTHER
        text = str(value).strip()
        for member in cls:
            if text.lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown relationship: {value}")
