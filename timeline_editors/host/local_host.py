#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Local host for the Timeline Editors application.

The editor windows only know the channel interface of timeline_editors.ipc.
LocalHost answers those channels from a SQLite database so that the editors
can run on their own; a different host can take its place behind the same
bridge.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError

from timeline_editors.host.database import (
    Character, CharacterRelationship, Database, ItemPicture, Story, Timeline, TimelineItem
)
from timeline_editors.ipc import HostBridge
from timeline_editors.models.relationship import MAX_STRENGTH, MIN_STRENGTH, clamp_strength
from timeline_editors.relationships import custom_type_problem, is_custom_type, is_known_relationship_type

logger = logging.getLogger(__name__)

RELATIONSHIP_FIELDS = (
    'relationship_type', 'custom_relationship_type', 'relationship_degree',
    'relationship_modifier', 'relationship_strength', 'is_bidirectional', 'notes',
)


def validate_relationship_data(data: Dict[str, Any]) -> None:
    """Check a relationship payload before it is stored.

    Args:
        data: Relationship dictionary from an editor

    Raises:
        ValueError: If the payload breaks a relationship invariant
    """
    relationship_type = data.get('relationship_type')
    if not is_known_relationship_type(relationship_type):
        raise ValueError(f"Invalid relationship type: {relationship_type}")

    custom_type = data.get('custom_relationship_type')
    if is_custom_type(relationship_type):
        if not custom_type:
            raise ValueError("Custom relationship type is required")
        problem = custom_type_problem(custom_type)
        if problem:
            raise ValueError(problem)
    elif custom_type:
        raise ValueError("Custom relationship type is only allowed for custom or other relationships")

    strength = data.get('relationship_strength')
    if strength is not None and not MIN_STRENGTH <= int(strength) <= MAX_STRENGTH:
        raise ValueError(f"Relationship strength must be between {MIN_STRENGTH} and {MAX_STRENGTH}")


class LocalHost:
    """Answers editor channels from the local database."""

    def __init__(self, database: Database, bridge: Optional[HostBridge] = None):
        """Initialize the local host and register its channel handlers.

        Args:
            database: Database holding the timeline data
            bridge: Bridge to serve; a new one is created if omitted
        """
        self.database = database
        self.bridge = bridge or HostBridge()
        self.current_timeline_id: Optional[int] = None
        self.refresh_count = 0
        self._editor_request: Optional[Dict[str, Any]] = None

        self.bridge.handle('get-relationship-editor-data', self.get_relationship_editor_data)
        self.bridge.handle('get-character-relationships-between', self.get_character_relationships_between)
        self.bridge.handle('create-character-relationship', self.create_character_relationship)
        self.bridge.handle('update-character-relationship', self.update_character_relationship)
        self.bridge.handle('refresh-character-manager', self.refresh_character_manager)
        self.bridge.handle('get-item', self.get_item)
        self.bridge.handle('add-timeline-item', self.add_timeline_item)
        self.bridge.handle('update-timeline-item', self.update_timeline_item)
        self.bridge.handle('story-search', self.story_search)
        self.bridge.handle('item-editor-closing', self.item_editor_closing)

    # Data setup

    def create_timeline(self, title: str) -> int:
        """Create a timeline and make it the current one.

        Returns:
            ID of the new timeline
        """
        session = self.database.get_session()
        try:
            timeline = Timeline.create(session, title=title)
            self.database.commit_session(session)
            self.current_timeline_id = timeline.id
            return timeline.id
        finally:
            self.database.close_session(session)

    def create_character(self, name: str, timeline_id: int, color: Optional[str] = None) -> int:
        """Create a character and notify the editors.

        Returns:
            ID of the new character
        """
        session = self.database.get_session()
        try:
            character = Character.create(session, name=name, timeline_id=timeline_id, color=color)
            self.database.commit_session(session)
            character_id = character.id
        finally:
            self.database.close_session(session)

        self.bridge.publish('character-created')
        return character_id

    def update_character(self, character_id: int, **kwargs: Any) -> bool:
        """Update a character and notify the editors."""
        session = self.database.get_session()
        try:
            character = session.get(Character, character_id)
            if character is None:
                return False
            character.update(session, **kwargs)
            self.database.commit_session(session)
        finally:
            self.database.close_session(session)

        self.bridge.publish('character-updated')
        return True

    def create_story(self, title: str, timeline_id: int) -> int:
        """Create a story items can refer to."""
        session = self.database.get_session()
        try:
            story = Story.create(session, title=title, timeline_id=timeline_id)
            self.database.commit_session(session)
            return story.id
        finally:
            self.database.close_session(session)

    def open_relationship_editor(self, character1_id: int, character2_id: int, timeline_id: int,
                                 relationship_id: Optional[int] = None) -> None:
        """Stage the data the next relationship editor window asks for.

        Args:
            character1_id: ID of the first character
            character2_id: ID of the second character
            timeline_id: ID of the timeline
            relationship_id: ID of the relationship to edit, None to create one
        """
        self.current_timeline_id = timeline_id
        self._editor_request = {
            'character1_id': character1_id,
            'character2_id': character2_id,
            'timeline_id': timeline_id,
            'relationship_id': relationship_id,
        }

    # Relationship channels

    def get_relationship_editor_data(self) -> Optional[Dict[str, Any]]:
        """Answer get-relationship-editor-data."""
        request = self._editor_request
        if request is None:
            logger.warning("Relationship editor opened without staged data")
            return None

        session = self.database.get_session()
        try:
            character1 = session.get(Character, request['character1_id'])
            character2 = session.get(Character, request['character2_id'])
            if character1 is None or character2 is None:
                logger.error(f"Unknown character in editor request: {request}")
                return None

            relationship = None
            if request['relationship_id'] is not None:
                rel = session.get(CharacterRelationship, request['relationship_id'])
                relationship = rel.to_dict() if rel else None

            return {
                'character1': character1.to_dict(),
                'character2': character2.to_dict(),
                'isEdit': relationship is not None,
                'relationship': relationship,
                'timelineId': request['timeline_id'],
            }
        finally:
            self.database.close_session(session)

    def get_character_relationships_between(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Answer get-character-relationships-between.

        Relationships in both directions are returned, strongest first.
        """
        character1_id = params.get('character1Id')
        character2_id = params.get('character2Id')
        timeline_id = params.get('timelineId') or self.current_timeline_id

        session = self.database.get_session()
        try:
            rows = (
                session.query(CharacterRelationship)
                .filter(CharacterRelationship.timeline_id == timeline_id)
                .filter(or_(
                    and_(CharacterRelationship.character_1_id == character1_id,
                         CharacterRelationship.character_2_id == character2_id),
                    and_(CharacterRelationship.character_1_id == character2_id,
                         CharacterRelationship.character_2_id == character1_id),
                ))
                .order_by(CharacterRelationship.relationship_strength.desc(),
                          CharacterRelationship.created_at.asc())
                .all()
            )
            return {'success': True, 'relationships': [row.to_dict() for row in rows]}
        except SQLAlchemyError as e:
            logger.error(f"Error loading relationships: {e}")
            return {'success': False, 'error': str(e), 'relationships': []}
        finally:
            self.database.close_session(session)

    def create_character_relationship(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Answer create-character-relationship."""
        session = self.database.get_session()
        try:
            validate_relationship_data(data)
            for key in ('character_1_id', 'character_2_id'):
                if session.get(Character, data.get(key)) is None:
                    raise ValueError(f"Unknown character: {data.get(key)}")

            values = {name: data.get(name) for name in RELATIONSHIP_FIELDS}
            values['relationship_strength'] = clamp_strength(values['relationship_strength'])
            values['is_bidirectional'] = bool(values['is_bidirectional'])
            rel = CharacterRelationship.create(
                session,
                character_1_id=data.get('character_1_id'),
                character_2_id=data.get('character_2_id'),
                timeline_id=data.get('timeline_id') or self.current_timeline_id,
                **values
            )
            self.database.commit_session(session)
            logger.info(f"Added character relationship: {rel.character_1_id} -> {rel.character_2_id}")
            return {'success': True, 'id': rel.id}
        except (ValueError, SQLAlchemyError) as e:
            self.database.rollback_session(session)
            logger.error(f"Error creating relationship: {e}")
            return {'success': False, 'error': str(e)}
        finally:
            self.database.close_session(session)

    def update_character_relationship(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Answer update-character-relationship."""
        relationship_id = params.get('id')
        data = params.get('relationship') or {}

        session = self.database.get_session()
        try:
            validate_relationship_data(data)
            rel = session.get(CharacterRelationship, relationship_id)
            if rel is None:
                return {'success': False, 'error': f"Relationship {relationship_id} not found"}

            values = {name: data.get(name) for name in RELATIONSHIP_FIELDS}
            values['relationship_strength'] = clamp_strength(values['relationship_strength'])
            values['is_bidirectional'] = bool(values['is_bidirectional'])
            rel.update(session, **values)
            self.database.commit_session(session)
            logger.info(f"Updated character relationship {relationship_id}")
            return {'success': True}
        except (ValueError, SQLAlchemyError) as e:
            self.database.rollback_session(session)
            logger.error(f"Error updating relationship {relationship_id}: {e}")
            return {'success': False, 'error': str(e)}
        finally:
            self.database.close_session(session)

    def refresh_character_manager(self) -> Dict[str, Any]:
        """Answer refresh-character-manager.

        The character manager window lives outside the editors; the host only
        counts the requests.
        """
        self.refresh_count += 1
        logger.debug(f"Character manager refresh requested ({self.refresh_count})")
        return {'success': True}

    # Item channels

    def get_item(self, item_id: Any) -> Optional[Dict[str, Any]]:
        """Answer get-item."""
        session = self.database.get_session()
        try:
            item = session.get(TimelineItem, item_id)
            return item.to_dict() if item else None
        finally:
            self.database.close_session(session)

    def _apply_item_data(self, session: Any, item: TimelineItem, data: Dict[str, Any]) -> None:
        """Copy an item payload onto a stored item, replacing its pictures."""
        if not (data.get('title') or '').strip():
            raise ValueError("Item title is required")

        item.update(
            session,
            title=data['title'].strip(),
            description=data.get('description'),
            content=data.get('content'),
            year=int(data.get('year') or 0),
            subtick=int(data.get('subtick') or 0),
            book_title=data.get('book_title'),
            chapter=data.get('chapter'),
            page=data.get('page'),
            story=data.get('story'),
            story_id=data.get('story_id'),
        )
        item.tags = list(data.get('tags') or [])
        item.story_refs = list(data.get('story_refs') or [])
        item.pictures = [
            ItemPicture(position=index, picture=pic['picture'],
                        title=pic.get('title'), description=pic.get('description'))
            for index, pic in enumerate(data.get('pictures') or [])
        ]
        session.flush()

    def add_timeline_item(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Answer add-timeline-item."""
        session = self.database.get_session()
        try:
            item = TimelineItem(timeline_id=data.get('timeline_id') or self.current_timeline_id,
                                title=(data.get('title') or '').strip())
            session.add(item)
            self._apply_item_data(session, item, data)
            self.database.commit_session(session)
            logger.info(f"Added timeline item {item.id}: {item.title}")
            return {'success': True, 'id': item.id}
        except (ValueError, KeyError, SQLAlchemyError) as e:
            self.database.rollback_session(session)
            logger.error(f"Error adding timeline item: {e}")
            return {'success': False, 'error': str(e)}
        finally:
            self.database.close_session(session)

    def update_timeline_item(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Answer update-timeline-item."""
        session = self.database.get_session()
        try:
            item = session.get(TimelineItem, data.get('id'))
            if item is None:
                return {'success': False, 'error': f"Item {data.get('id')} not found"}
            self._apply_item_data(session, item, data)
            self.database.commit_session(session)
            logger.info(f"Updated timeline item {item.id}")
            return {'success': True, 'id': item.id}
        except (ValueError, KeyError, SQLAlchemyError) as e:
            self.database.rollback_session(session)
            logger.error(f"Error updating timeline item: {e}")
            return {'success': False, 'error': str(e)}
        finally:
            self.database.close_session(session)

    def search_stories(self, query: str) -> List[Dict[str, Any]]:
        """Find stories of the current timeline whose title contains the query."""
        session = self.database.get_session()
        try:
            stories = session.query(Story).filter(Story.title.ilike(f"%{query}%"))
            if self.current_timeline_id is not None:
                stories = stories.filter(Story.timeline_id == self.current_timeline_id)
            return [{'id': story.id, 'title': story.title} for story in stories.order_by(Story.title)]
        finally:
            self.database.close_session(session)

    def story_search(self, query: str) -> None:
        """Answer story-search by publishing story-search-results."""
        self.bridge.publish('story-search-results', self.search_stories(query))

    def item_editor_closing(self, info: Optional[Dict[str, Any]] = None) -> None:
        logger.debug(f"Item editor closing: {info}")
