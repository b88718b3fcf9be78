#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Utilities package for the Timeline Editors application.

This package contains settings, theming and picture helpers. The theme
manager is imported from its module directly so that loading settings does
not require Qt.
"""

from timeline_editors.utils.settings import EditorSettings
from timeline_editors.utils.pictures import encode_picture, decode_picture
