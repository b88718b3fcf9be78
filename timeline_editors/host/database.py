#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Database models for the local host of the Timeline Editors application.

This module provides the SQLAlchemy setup and the tables the local host
keeps timelines, characters, relationships and timeline items in.
"""

from typing import Any, Dict, List
from datetime import datetime
import json

from sqlalchemy import create_engine, Column, Integer, String, DateTime, Boolean, ForeignKey, Text
from sqlalchemy.orm import declarative_base, sessionmaker, relationship, scoped_session

# Create the base model class
Base = declarative_base()


class BaseModel(Base):
    """Base model class with common functionality for all models."""

    __abstract__ = True

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def create(cls, session: Any, **kwargs: Any) -> "BaseModel":
        """Create a new instance of the model and add it to the session."""
        instance = cls(**kwargs)
        session.add(instance)
        session.flush()
        return instance

    def update(self, session: Any, **kwargs: Any) -> None:
        """Update the instance with the provided attributes."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
        self.updated_at = datetime.utcnow()
        session.flush()

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model instance to a dictionary."""
        result = {}
        for column in self.__table__.columns:
            result[column.name] = getattr(self, column.name)
        return result


class Timeline(BaseModel):
    """Model representing a timeline."""

    __tablename__ = 'timelines'

    title = Column(String(255), nullable=False)

    characters = relationship("Character", back_populates="timeline")
    stories = relationship("Story", back_populates="timeline")

    def __repr__(self) -> str:
        return f"<Timeline(id={self.id}, title='{self.title}')>"


class Story(BaseModel):
    """Model representing a story timeline items can refer to."""

    __tablename__ = 'stories'

    title = Column(String(255), nullable=False)
    timeline_id = Column(Integer, ForeignKey('timelines.id'), nullable=False)

    timeline = relationship("Timeline", back_populates="stories")

    def __repr__(self) -> str:
        return f"<Story(id={self.id}, title='{self.title}')>"


class Character(BaseModel):
    """Model representing a character of a timeline."""

    __tablename__ = 'characters'

    name = Column(String(255), nullable=False)
    color = Column(String(20), nullable=True)  # Hex color code
    timeline_id = Column(Integer, ForeignKey('timelines.id'), nullable=False)

    timeline = relationship("Timeline", back_populates="characters")

    def __repr__(self) -> str:
        return f"<Character(id={self.id}, name='{self.name}')>"


class CharacterRelationship(BaseModel):
    """Model representing a directed relationship between two characters."""

    __tablename__ = 'character_relationships'

    character_1_id = Column(Integer, ForeignKey('characters.id', ondelete='CASCADE'), nullable=False)
    character_2_id = Column(Integer, ForeignKey('characters.id', ondelete='CASCADE'), nullable=False)
    relationship_type = Column(String(64), nullable=False)
    custom_relationship_type = Column(String(50), nullable=True)
    relationship_degree = Column(String(64), nullable=True)
    relationship_modifier = Column(String(64), nullable=True)
    relationship_strength = Column(Integer, default=50)  # 0 to 100
    is_bidirectional = Column(Boolean, default=False)
    notes = Column(Text, nullable=True)
    timeline_id = Column(Integer, ForeignKey('timelines.id', ondelete='CASCADE'), nullable=False)

    character_1 = relationship("Character", foreign_keys=[character_1_id])
    character_2 = relationship("Character", foreign_keys=[character_2_id])

    def __repr__(self) -> str:
        return (f"<CharacterRelationship(id={self.id}, {self.character_1_id} -> {self.character_2_id}, "
                f"type='{self.relationship_type}')>")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the relationship to a dictionary with the character names."""
        result = super().to_dict()
        result['character_1_name'] = self.character_1.name if self.character_1 else None
        result['character_2_name'] = self.character_2.name if self.character_2 else None
        return result


class TimelineItem(BaseModel):
    """Model representing an entry on a timeline."""

    __tablename__ = 'timeline_items'

    timeline_id = Column(Integer, ForeignKey('timelines.id', ondelete='CASCADE'), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    year = Column(Integer, default=0)
    subtick = Column(Integer, default=0)
    book_title = Column(String(255), nullable=True)
    chapter = Column(String(64), nullable=True)
    page = Column(String(64), nullable=True)
    story = Column(String(255), nullable=True)
    story_id = Column(String(64), nullable=True)

    # Lists stored as JSON
    tags_json = Column(Text, nullable=True)
    story_refs_json = Column(Text, nullable=True)

    pictures = relationship(
        "ItemPicture",
        back_populates="item",
        order_by="ItemPicture.position",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<TimelineItem(id={self.id}, title='{self.title}', year={self.year})>"

    @property
    def tags(self) -> List[str]:
        """Get the tags as a list."""
        if not self.tags_json:
            return []
        return json.loads(self.tags_json)

    @tags.setter
    def tags(self, value: List[str]) -> None:
        self.tags_json = json.dumps(value) if value else None

    @property
    def story_refs(self) -> List[Dict[str, Any]]:
        """Get the story references as a list of dictionaries."""
        if not self.story_refs_json:
            return []
        return json.loads(self.story_refs_json)

    @story_refs.setter
    def story_refs(self, value: List[Dict[str, Any]]) -> None:
        self.story_refs_json = json.dumps(value) if value else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the item to the dictionary the item editor expects."""
        result = super().to_dict()
        result.pop('tags_json')
        result.pop('story_refs_json')
        result['tags'] = self.tags
        result['story_refs'] = self.story_refs
        result['pictures'] = [
            {'picture': pic.picture, 'title': pic.title, 'description': pic.description}
            for pic in self.pictures
        ]
        return result


class ItemPicture(BaseModel):
    """Model representing a picture attached to a timeline item."""

    __tablename__ = 'item_pictures'

    item_id = Column(Integer, ForeignKey('timeline_items.id', ondelete='CASCADE'), nullable=False)
    position = Column(Integer, default=0)
    picture = Column(Text, nullable=False)  # data URL
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    item = relationship("TimelineItem", back_populates="pictures")


# Database connection and session management
class Database:
    """Database connection and session management."""

    def __init__(self, db_path: str = ':memory:'):
        """Initialize the database connection.

        Args:
            db_path: Path to the database file, ':memory:' or a connection string
        """
        if db_path == ':memory:':
            url = 'sqlite://'
        elif '://' in db_path:
            url = db_path
        else:
            url = f'sqlite:///{db_path}'
        self.engine = create_engine(url)
        self.session_factory = sessionmaker(bind=self.engine)
        self.Session = scoped_session(self.session_factory)

    def create_tables(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Any:
        """Get a new session for database operations."""
        return self.Session()

    def close_session(self, session: Any) -> None:
        """Close the session."""
        session.close()

    def commit_session(self, session: Any) -> None:
        """Commit the session."""
        session.commit()

    def rollback_session(self, session: Any) -> None:
        """Rollback the session."""
        session.rollback()
