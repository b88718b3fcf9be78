#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Error types for the Timeline Editors application.

Validation errors carry the name of the form field that should receive focus
and a message that can be shown to the user as-is.
"""

from typing import Optional


class EditorError(Exception):
    """Base class for all editor errors."""


class RelationshipValidationError(EditorError):
    """A relationship candidate failed structural validation."""

    field: str = "relationship_type"

    def __init__(self, message: str, field: Optional[str] = None):
        """Initialize the validation error.

        Args:
            message: User-facing message
            field: Name of the form field to focus
        """
        super().__init__(message)
        self.message = message
        if field is not None:
            self.field = field


class MissingTypeError(RelationshipValidationError):
    """No relationship type was selected."""

    def __init__(self):
        super().__init__("Please select a relationship type.", "relationship_type")


class MissingCustomTypeError(RelationshipValidationError):
    """A custom/other type was selected without custom text."""

    def __init__(self):
        super().__init__("Please enter a custom relationship type.", "custom_relationship_type")


class InvalidCustomTypeError(RelationshipValidationError):
    """The custom relationship text is outside the allowed length."""

    def __init__(self, message: str):
        super().__init__(message, "custom_relationship_type")


class ItemValidationError(EditorError):
    """A timeline item failed required-field validation."""

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.message = message
        self.field = field


class MissingTitleError(ItemValidationError):
    """The timeline item has no title."""

    def __init__(self):
        super().__init__("Please enter a title.", "title")


class TransportFailure(EditorError):
    """A host call was rejected or reported failure."""


class ChannelNotAllowed(TransportFailure):
    """The channel is not on the bridge's allow-list."""

    def __init__(self, channel: str):
        super().__init__(f"Channel not allowed: {channel}")
        self.channel = channel


class InitializationFailure(EditorError):
    """The editor window received no data from the host when it opened."""


class ViewNotBoundError(EditorError):
    """A controller tried to refresh a view that is not attached."""
