#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Data models for the Timeline Editors application.

This package contains the typed records and form states the editors work with.
"""

from timeline_editors.models.relationship import (
    RelationshipRecord, RelationshipFormState, DEFAULT_STRENGTH, clamp_strength
)
from timeline_editors.models.item import (
    ItemFormState, Picture, StoryRef, DEFAULT_GRANULARITY, generate_story_id
)

__all__ = [
    'RelationshipRecord',
    'RelationshipFormState',
    'DEFAULT_STRENGTH',
    'clamp_strength',
    'ItemFormState',
    'Picture',
    'StoryRef',
    'DEFAULT_GRANULARITY',
    'generate_story_id'
]
