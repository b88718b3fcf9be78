#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Controllers package for the Timeline Editors application.

Controllers hold the editor state and talk to the host; they do not import Qt.
"""

from timeline_editors.controllers.relationship_editor import (
    RelationshipEditorController, RelationshipEditorSession, SubmitOutcome, SubmitResult
)
from timeline_editors.controllers.item_editor import ItemEditorController

__all__ = [
    'RelationshipEditorController',
    'RelationshipEditorSession',
    'SubmitOutcome',
    'SubmitResult',
    'ItemEditorController'
]
