#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Views package for the Timeline Editors application.

This package contains the PyQt6 dialogs of the editor windows.
"""

from timeline_editors.views.relationship_editor import RelationshipEditorDialog
from timeline_editors.views.item_editor import ItemEditorDialog

__all__ = ['RelationshipEditorDialog', 'ItemEditorDialog']
