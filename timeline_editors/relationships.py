#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Relationship classification for the Timeline Editors application.

This module holds the closed set of relationship types, decides the default
directionality of a type, and validates and deduplicates candidate
relationship records. Nothing here touches Qt or the host.
"""

import logging
from enum import Enum, auto
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from timeline_editors.errors import (
    InvalidCustomTypeError, MissingCustomTypeError, MissingTypeError
)
from timeline_editors.models.relationship import RelationshipRecord

logger = logging.getLogger(__name__)


# Relationship Category Enum
class RelationshipCategory(Enum):
    """Enumeration of relationship type categories shown in the type picker."""
    FAMILY = auto()
    EXTENDED_FAMILY = auto()
    GUARDIANSHIP = auto()
    SOCIAL = auto()
    BONDS = auto()
    OTHER = auto()

    def __str__(self):
        return {
            RelationshipCategory.FAMILY: "Family",
            RelationshipCategory.EXTENDED_FAMILY: "Extended Family",
            RelationshipCategory.GUARDIANSHIP: "Guardianship & Mentoring",
            RelationshipCategory.SOCIAL: "Social",
            RelationshipCategory.BONDS: "Bonds & Allegiance",
            RelationshipCategory.OTHER: "Other",
        }[self]


CUSTOM_TYPES = frozenset({"custom", "other"})

RELATIONSHIP_TYPES_BY_CATEGORY: Dict[RelationshipCategory, Tuple[str, ...]] = {
    RelationshipCategory.FAMILY: (
        "parent", "child", "sibling", "spouse", "partner", "ex-spouse", "ex-partner",
        "grandparent", "grandchild", "great-grandparent", "great-grandchild",
        "great-great-grandparent", "great-great-grandchild",
        "aunt", "uncle", "niece", "nephew", "cousin", "great-aunt", "great-uncle",
        "great-niece", "great-nephew",
    ),
    RelationshipCategory.EXTENDED_FAMILY: (
        "step-parent", "step-child", "step-sibling", "half-sibling",
        "step-grandparent", "step-grandchild",
        "parent-in-law", "child-in-law", "sibling-in-law", "grandparent-in-law", "grandchild-in-law",
        "adoptive-parent", "adoptive-child", "adoptive-sibling",
        "foster-parent", "foster-child", "foster-sibling",
        "biological-parent", "biological-child",
    ),
    RelationshipCategory.GUARDIANSHIP: (
        "godparent", "godchild", "mentor", "apprentice", "guardian", "ward",
    ),
    RelationshipCategory.SOCIAL: (
        "best-friend", "friend", "ally", "enemy", "rival", "acquaintance", "colleague", "neighbor",
    ),
    RelationshipCategory.BONDS: (
        "familiar", "bonded", "master", "servant", "liege", "vassal", "clan-member", "pack-member",
    ),
    RelationshipCategory.OTHER: ("custom", "other"),
}

RELATIONSHIP_TYPES = frozenset(
    rel_type
    for types in RELATIONSHIP_TYPES_BY_CATEGORY.values()
    for rel_type in types
)

# Types whose meaning is symmetric between the two characters
BIDIRECTIONAL_TYPES = frozenset({
    "sibling", "spouse", "partner", "ex-spouse", "ex-partner", "cousin",
    "step-sibling", "half-sibling", "adoptive-sibling", "foster-sibling",
    "best-friend", "friend", "ally", "enemy", "rival", "acquaintance",
    "colleague", "neighbor", "familiar", "bonded", "clan-member", "pack-member",
})

RELATIONSHIP_DEGREES = ("first", "second", "third", "fourth", "once-removed", "twice-removed")
RELATIONSHIP_MODIFIERS = ("former", "estranged", "secret", "honorary", "alleged", "deceased")

CUSTOM_TYPE_MIN_LENGTH = 2
CUSTOM_TYPE_MAX_LENGTH = 50


def is_custom_type(relationship_type: Optional[str]) -> bool:
    """Check whether a type is one of the free-text sentinels.

    Args:
        relationship_type: Relationship type tag

    Returns:
        True for 'custom' and 'other'
    """
    return relationship_type in CUSTOM_TYPES


def is_known_relationship_type(relationship_type: Optional[str]) -> bool:
    """Check whether a type belongs to the closed set of relationship types."""
    return relationship_type in RELATIONSHIP_TYPES


def classify_directionality(relationship_type: Optional[str]) -> bool:
    """Decide whether a relationship type is bidirectional by nature.

    Args:
        relationship_type: Any relationship type tag, including unknown or
            custom strings

    Returns:
        True if the type is in the bidirectional set, False otherwise
    """
    return relationship_type in BIDIRECTIONAL_TYPES


def apply_directionality(relationship_type: Optional[str], current: bool) -> bool:
    """Compute the bidirectional flag after the type selection changed.

    Known symmetric types force the flag on and other known types force it
    off. Empty, custom and other types leave the user's choice alone.

    Args:
        relationship_type: Newly selected relationship type
        current: Current value of the bidirectional flag

    Returns:
        The new value of the bidirectional flag
    """
    if classify_directionality(relationship_type):
        return True
    if relationship_type and not is_custom_type(relationship_type):
        return False
    return current


def custom_type_problem(text: Optional[str]) -> Optional[str]:
    """Check the length constraint on custom relationship text.

    Empty text is not reported here; it is handled by validate_candidate.

    Args:
        text: Custom relationship type text

    Returns:
        A user-facing message, or None if the text is acceptable
    """
    value = (text or "").strip()
    if len(value) > CUSTOM_TYPE_MAX_LENGTH:
        return f"Custom relationship type must be {CUSTOM_TYPE_MAX_LENGTH} characters or less"
    if 0 < len(value) < CUSTOM_TYPE_MIN_LENGTH:
        return f"Custom relationship type must be at least {CUSTOM_TYPE_MIN_LENGTH} characters"
    return None


def check_custom_type(record: RelationshipRecord) -> None:
    """Raise InvalidCustomTypeError if the record's custom text has a bad length."""
    if not is_custom_type(record.relationship_type):
        return
    problem = custom_type_problem(record.custom_relationship_type)
    if problem:
        raise InvalidCustomTypeError(problem)


def validate_candidate(record: RelationshipRecord) -> None:
    """Validate the structure of a candidate relationship.

    Args:
        record: Candidate relationship record

    Raises:
        MissingTypeError: If no relationship type is set
        MissingCustomTypeError: If a custom/other type has no custom text
    """
    if not record.relationship_type:
        raise MissingTypeError()

    if is_custom_type(record.relationship_type) and not record.custom_relationship_type:
        raise MissingCustomTypeError()


def is_duplicate(existing: RelationshipRecord, candidate: RelationshipRecord) -> bool:
    """Check whether an existing record duplicates a candidate.

    The character pair must match in the same direction; the reverse pair
    is a different relationship even when it is bidirectional.
    """
    same_type = existing.relationship_type == candidate.relationship_type
    same_custom_type = existing.custom_relationship_type == candidate.custom_relationship_type
    same_direction = (
        existing.character_1_id == candidate.character_1_id
        and existing.character_2_id == candidate.character_2_id
    )
    return same_type and same_custom_type and same_direction


def find_duplicates(candidate: RelationshipRecord,
                    existing: Iterable[RelationshipRecord]) -> List[RelationshipRecord]:
    """Find the existing records that duplicate a candidate.

    Args:
        candidate: Relationship about to be created
        existing: Snapshot of relationships between the two characters

    Returns:
        The matching records, possibly empty
    """
    duplicates = [rel for rel in existing if is_duplicate(rel, candidate)]
    if duplicates:
        logger.debug(f"Found {len(duplicates)} duplicate(s) for {candidate.relationship_type} "
                     f"{candidate.character_1_id} -> {candidate.character_2_id}")
    return duplicates


def resolve_duplicate_conflict(duplicates: List[RelationshipRecord],
                               confirm: Callable[[], bool]) -> bool:
    """Decide whether a save may proceed given the duplicates found.

    Args:
        duplicates: Result of find_duplicates
        confirm: Asks the user whether to create another relationship of the
            same type; only called when there are duplicates

    Returns:
        True if the save may proceed
    """
    if not duplicates:
        return True
    return bool(confirm())


def relationship_type_label(relationship_type: str) -> str:
    """Get a human-readable label for a relationship type tag."""
    return relationship_type.replace("-", " ")


def duplicate_prompt(record: RelationshipRecord, character1_name: str, character2_name: str) -> str:
    """Build the confirmation question shown for a duplicate relationship.

    Args:
        record: Candidate relationship record
        character1_name: Display name of the first character
        character2_name: Display name of the second character

    Returns:
        Question text
    """
    display = record.custom_relationship_type or relationship_type_label(record.relationship_type)
    return (
        f'A "{display}" relationship already exists between {character1_name} and '
        f'{character2_name} in this direction.\n\n'
        'Do you want to create another relationship of the same type?'
    )
