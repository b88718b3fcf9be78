#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Timeline item models for the Timeline Editors application.

This module defines the form state of the item editor together with its
picture attachments and story references.
"""

import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_GRANULARITY = 4


def generate_story_id() -> str:
    """Generate an identifier for a story reference typed in by the user.

    Returns:
        An id of the form STORY-<milliseconds>-<random>
    """
    return f"STORY-{int(time.time() * 1000)}-{random.randint(0, 9999)}"


@dataclass
class Picture:
    """An image attached to a timeline item, embedded as a data URL."""

    picture: str
    title: str = ""
    description: str = ""

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Picture":
        return cls(
            picture=data.get("picture") or "",
            title=data.get("title") or "",
            description=data.get("description") or "",
        )


@dataclass
class StoryRef:
    """A reference from a timeline item to a story."""

    story_title: str
    story_id: str = ""


@dataclass
class ItemFormState:
    """Values of the item editor form."""

    id: Optional[Any] = None
    title: str = ""
    description: str = ""
    content: str = ""
    year: int = 0
    subtick: int = 0
    book_title: str = ""
    chapter: str = ""
    page: str = ""
    story: str = ""
    story_id: str = ""
    tags: List[str] = field(default_factory=list)
    story_refs: List[StoryRef] = field(default_factory=list)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "ItemFormState":
        """Create form state from an item dictionary received from the host.

        Args:
            item: Timeline item dictionary

        Returns:
            ItemFormState with blanks for absent fields
        """
        story_refs = [
            StoryRef(story_title=ref.get("story_title") or ref.get("title") or "",
                     story_id=str(ref.get("story_id") or ref.get("id") or ""))
            for ref in item.get("story_refs") or []
        ]
        return cls(
            id=item.get("id"),
            title=item.get("title") or "",
            description=item.get("description") or "",
            content=item.get("content") or "",
            year=_to_int(item.get("year")),
            subtick=_to_int(item.get("subtick")),
            book_title=item.get("book_title") or "",
            chapter=str(item.get("chapter") or ""),
            page=str(item.get("page") or ""),
            story=item.get("story") or "",
            story_id=str(item.get("story_id") or ""),
            tags=list(dict.fromkeys(item.get("tags") or [])),
            story_refs=story_refs,
        )


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
