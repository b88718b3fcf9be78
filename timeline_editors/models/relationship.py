#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Relationship records for the Timeline Editors application.

This module defines the typed relationship record exchanged with the host and
the form state the relationship editor is edited through.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

DEFAULT_STRENGTH = 50
MIN_STRENGTH = 0
MAX_STRENGTH = 100


def clamp_strength(value: Optional[Any]) -> int:
    """Convert a strength value to an int in the allowed range.

    Args:
        value: Raw strength value; None or an unparsable value means absent

    Returns:
        The strength, DEFAULT_STRENGTH when absent
    """
    if value is None or value == "":
        return DEFAULT_STRENGTH
    try:
        strength = int(value)
    except (TypeError, ValueError):
        return DEFAULT_STRENGTH
    return max(MIN_STRENGTH, min(MAX_STRENGTH, strength))


def _optional_text(value: Optional[Any]) -> Optional[str]:
    """Normalize an optional text field so that blank values become None."""
    if value is None:
        return None
    text = str(value)
    return text if text else None


@dataclass
class RelationshipRecord:
    """A directed relationship between two characters."""

    character_1_id: Any
    character_2_id: Any
    relationship_type: str
    timeline_id: Any
    custom_relationship_type: Optional[str] = None
    relationship_degree: Optional[str] = None
    relationship_modifier: Optional[str] = None
    relationship_strength: int = DEFAULT_STRENGTH
    is_bidirectional: bool = False
    notes: Optional[str] = None
    id: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        """Convert the record to the dictionary sent to the host.

        The id is left out; updates send it next to the record.
        """
        payload = asdict(self)
        payload.pop("id")
        return payload

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "RelationshipRecord":
        """Create a record from a dictionary received from the host.

        Args:
            data: Relationship dictionary

        Returns:
            RelationshipRecord with explicit defaults for absent fields
        """
        return cls(
            id=data.get("id"),
            character_1_id=data.get("character_1_id"),
            character_2_id=data.get("character_2_id"),
            relationship_type=data.get("relationship_type") or "",
            timeline_id=data.get("timeline_id"),
            custom_relationship_type=_optional_text(data.get("custom_relationship_type")),
            relationship_degree=_optional_text(data.get("relationship_degree")),
            relationship_modifier=_optional_text(data.get("relationship_modifier")),
            relationship_strength=clamp_strength(data.get("relationship_strength")),
            is_bidirectional=bool(data.get("is_bidirectional", False)),
            notes=_optional_text(data.get("notes")),
        )


@dataclass
class RelationshipFormState:
    """Values of the relationship editor form.

    Text fields hold what the widgets show, so blanks are empty strings
    rather than None.
    """

    relationship_type: str = ""
    custom_relationship_type: str = ""
    is_bidirectional: bool = False
    relationship_degree: str = ""
    relationship_modifier: str = ""
    relationship_strength: Optional[int] = DEFAULT_STRENGTH
    notes: str = ""
