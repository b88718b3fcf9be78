#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Relationship editor controller for the Timeline Editors application.

This module runs the create/edit cycle of the relationship editor window:
it loads the editor session from the host, keeps the bidirectional flag in
step with the selected type, and takes a submitted form through validation,
duplicate checking and saving. It has no Qt dependency; the dialog in
timeline_editors.views.relationship_editor is a projection of its state.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from timeline_editors.errors import (
    InitializationFailure, RelationshipValidationError, TransportFailure
)
from timeline_editors.ipc import HostBridge
from timeline_editors.models.relationship import (
    RelationshipFormState, RelationshipRecord, clamp_strength
)
from timeline_editors.relationships import (
    apply_directionality, check_custom_type, duplicate_prompt, find_duplicates,
    is_custom_type, resolve_duplicate_conflict, validate_candidate
)

logger = logging.getLogger(__name__)

DEFAULT_ACCENT_COLOR = "#2d5016"


class FormPhase(Enum):
    """Phases of the relationship form between two user actions."""
    IDLE = auto()
    VALIDATING = auto()
    DUPLICATE_CHECK = auto()
    SUBMITTING = auto()
    CLOSED = auto()


class SubmitOutcome(Enum):
    """How a submit attempt ended."""
    CLOSED = auto()
    INVALID = auto()
    DECLINED = auto()
    FAILED = auto()
    BUSY = auto()


@dataclass
class SubmitResult:
    """Result of RelationshipEditorController.submit."""

    outcome: SubmitOutcome
    message: str = ""
    field: Optional[str] = None


@dataclass
class RelationshipEditorSession:
    """Everything the editor knows about the relationship being edited.

    Built once when the window opens and passed to every handler.
    """

    character1: Dict[str, Any]
    character2: Dict[str, Any]
    timeline_id: Any
    is_edit: bool = False
    relationship: Optional[RelationshipRecord] = None
    existing_relationships: List[RelationshipRecord] = field(default_factory=list)

    @property
    def character1_name(self) -> str:
        return self.character1.get('name') or 'Character 1'

    @property
    def character2_name(self) -> str:
        return self.character2.get('name') or 'Character 2'

    @property
    def accent_color(self) -> str:
        """Colour of the first character, used to accent the window."""
        return self.character1.get('color') or DEFAULT_ACCENT_COLOR

    @property
    def save_button_text(self) -> str:
        return 'Update Relationship' if self.is_edit else 'Save Relationship'


def arrow_for(is_bidirectional: bool) -> str:
    """Get the arrow shown between the two character names."""
    return '↔' if is_bidirectional else '→'


def collect_form_data(session: RelationshipEditorSession,
                      form: RelationshipFormState) -> RelationshipRecord:
    """Build a relationship record from the form.

    Args:
        session: Current editor session
        form: Form values

    Returns:
        The candidate relationship record
    """
    relationship_type = form.relationship_type
    custom_type = form.custom_relationship_type.strip()

    return RelationshipRecord(
        character_1_id=session.character1.get('id'),
        character_2_id=session.character2.get('id'),
        relationship_type=relationship_type,
        custom_relationship_type=custom_type if is_custom_type(relationship_type) else None,
        relationship_degree=form.relationship_degree or None,
        relationship_modifier=form.relationship_modifier or None,
        relationship_strength=clamp_strength(form.relationship_strength),
        is_bidirectional=form.is_bidirectional,
        notes=form.notes.strip() or None,
        timeline_id=session.timeline_id,
    )


def form_from_record(record: RelationshipRecord) -> RelationshipFormState:
    """Rebuild the form values for an existing relationship.

    The stored bidirectional flag is shown as stored; the type's default
    directionality is only applied when the user changes the type.

    Args:
        record: Relationship record to edit

    Returns:
        Form values reproducing the record
    """
    return RelationshipFormState(
        relationship_type=record.relationship_type or '',
        custom_relationship_type=record.custom_relationship_type or '',
        is_bidirectional=record.is_bidirectional,
        relationship_degree=record.relationship_degree or '',
        relationship_modifier=record.relationship_modifier or '',
        relationship_strength=clamp_strength(record.relationship_strength),
        notes=record.notes or '',
    )


class RelationshipEditorController:
    """Drives one relationship editor window."""

    def __init__(self, bridge: HostBridge):
        """Initialize the controller.

        Args:
            bridge: Connection to the host
        """
        self.bridge = bridge
        self.session: Optional[RelationshipEditorSession] = None
        self.phase = FormPhase.IDLE
        self._unsubscribers: List[Callable[[], None]] = []

    def initialize(self) -> RelationshipEditorSession:
        """Load the editor session from the host.

        Returns:
            The new session

        Raises:
            InitializationFailure: If the host sent no editor data
        """
        try:
            data = self.bridge.invoke('get-relationship-editor-data')
        except TransportFailure as e:
            logger.error(f"Error initializing relationship editor: {e}")
            raise InitializationFailure(str(e)) from e

        if not data:
            logger.error("No relationship data received")
            raise InitializationFailure("No relationship data received")

        logger.info(f"Received relationship data: {data}")

        relationship = data.get('relationship')
        self.session = RelationshipEditorSession(
            character1=data.get('character1') or {},
            character2=data.get('character2') or {},
            timeline_id=data.get('timelineId'),
            is_edit=bool(data.get('isEdit', False)),
            relationship=RelationshipRecord.from_payload(relationship) if relationship else None,
        )
        self.session.existing_relationships = self.load_existing_relationships()
        self.subscribe()
        return self.session

    def load_existing_relationships(self) -> List[RelationshipRecord]:
        """Fetch the relationships already defined between the two characters.

        A failed fetch is logged and treated as no relationships.
        """
        session = self.session
        try:
            result = self.bridge.invoke('get-character-relationships-between', {
                'character1Id': session.character1.get('id'),
                'character2Id': session.character2.get('id'),
                'timelineId': session.timeline_id,
            })
        except TransportFailure as e:
            logger.error(f"Error loading existing relationships: {e}")
            return []

        relationships = [
            RelationshipRecord.from_payload(rel)
            for rel in (result or {}).get('relationships') or []
        ]
        logger.debug(f"Loaded {len(relationships)} existing relationship(s)")
        return relationships

    def initial_form(self) -> RelationshipFormState:
        """Get the form values the window opens with."""
        if self.session and self.session.is_edit and self.session.relationship:
            return form_from_record(self.session.relationship)
        return RelationshipFormState()

    def on_type_changed(self, form: RelationshipFormState, relationship_type: str) -> RelationshipFormState:
        """Apply a new relationship type selection to the form.

        Args:
            form: Current form values
            relationship_type: Newly selected type

        Returns:
            Updated form values
        """
        custom_text = form.custom_relationship_type if is_custom_type(relationship_type) else ''
        return replace(
            form,
            relationship_type=relationship_type,
            custom_relationship_type=custom_text,
            is_bidirectional=apply_directionality(relationship_type, form.is_bidirectional),
        )

    def submit(self, form: RelationshipFormState, confirm_duplicate: Callable[[str], bool]) -> SubmitResult:
        """Validate, check and save the form.

        Args:
            form: Form values to save
            confirm_duplicate: Asks the user the given question and returns
                True to go ahead; only called when a duplicate exists

        Returns:
            SubmitResult describing how the attempt ended
        """
        if self.session is None:
            return SubmitResult(SubmitOutcome.FAILED, 'Relationship editor is not initialized.')
        if self.phase is not FormPhase.IDLE:
            logger.debug(f"Ignoring submit while {self.phase.name}")
            return SubmitResult(SubmitOutcome.BUSY)

        session = self.session
        self.phase = FormPhase.VALIDATING
        try:
            record = collect_form_data(session, form)
            try:
                check_custom_type(record)
                validate_candidate(record)
            except RelationshipValidationError as e:
                return SubmitResult(SubmitOutcome.INVALID, e.message, e.field)

            if not session.is_edit:
                self.phase = FormPhase.DUPLICATE_CHECK
                duplicates = find_duplicates(record, session.existing_relationships)
                prompt = duplicate_prompt(record, session.character1_name, session.character2_name)
                if not resolve_duplicate_conflict(duplicates, lambda: confirm_duplicate(prompt)):
                    logger.info("Duplicate relationship declined by user")
                    return SubmitResult(SubmitOutcome.DECLINED)

            self.phase = FormPhase.SUBMITTING
            try:
                result = self.save_relationship(record)
                if not result or not result.get('success'):
                    raise TransportFailure((result or {}).get('error') or 'Failed to save relationship')
                self.bridge.invoke('refresh-character-manager')
            except TransportFailure as e:
                logger.error(f"Error saving relationship: {e}")
                return SubmitResult(SubmitOutcome.FAILED, f"Error saving relationship: {e}")

            self.phase = FormPhase.CLOSED
            return SubmitResult(SubmitOutcome.CLOSED)
        finally:
            if self.phase is not FormPhase.CLOSED:
                self.phase = FormPhase.IDLE

    def save_relationship(self, record: RelationshipRecord) -> Dict[str, Any]:
        """Send a create or update request for the record.

        Args:
            record: Validated relationship record

        Returns:
            The host's reply
        """
        session = self.session
        if session.is_edit:
            return self.bridge.invoke('update-character-relationship', {
                'id': session.relationship.id if session.relationship else None,
                'relationship': record.to_payload(),
            })
        return self.bridge.invoke('create-character-relationship', record.to_payload())

    def subscribe(self) -> None:
        """Refresh the character manager whenever a character changes."""
        if self._unsubscribers:
            return
        for channel in ('character-created', 'character-updated'):
            self._unsubscribers.append(
                self.bridge.receive(channel, lambda *args, ch=channel: self._on_character_changed(ch))
            )

    def _on_character_changed(self, channel: str) -> None:
        logger.info(f"{channel} received, refreshing character manager")
        try:
            self.bridge.invoke('refresh-character-manager')
        except TransportFailure as e:
            logger.error(f"Could not refresh character manager: {e}")

    def close(self) -> None:
        """Drop the host subscriptions; the window is going away."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.phase = FormPhase.CLOSED
