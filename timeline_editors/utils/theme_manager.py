#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Theme manager for the Timeline Editors application.

This module applies the editor windows' theme and remembers the choice.
"""

from typing import Literal, Optional

import qdarktheme

from timeline_editors.utils.settings import EditorSettings, THEMES


class ThemeManager:
    """Manages application themes using PyQtDarkTheme."""

    ThemeType = Literal["dark", "light", "auto"]

    def __init__(self, settings: EditorSettings):
        """Initialize the theme manager.

        Args:
            settings: Settings the theme choice is stored in
        """
        self.settings = settings

    @property
    def current_theme(self) -> ThemeType:
        return self.settings.theme

    def apply_theme(self, theme: Optional[ThemeType] = None) -> None:
        """Apply the specified theme or the current theme if none specified.

        Args:
            theme: The theme to apply ("dark", "light", or "auto")
        """
        if theme is not None and theme in THEMES and theme != self.settings.theme:
            self.settings.theme = theme

        qdarktheme.setup_theme(self.current_theme)

