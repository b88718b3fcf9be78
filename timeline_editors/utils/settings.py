#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings for the Timeline Editors application.

Settings live in a small JSON file in the application directory. Missing or
unreadable values fall back to the defaults below.
"""

import os
import json
import logging
from typing import Any, Dict

from timeline_editors.models.item import DEFAULT_GRANULARITY

logger = logging.getLogger(__name__)

THEMES = ("dark", "light", "auto")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class EditorSettings:
    """Persistent editor settings backed by a JSON file."""

    CONFIG_FILE = "editor_config.json"

    DEFAULTS: Dict[str, Any] = {
        "theme": "dark",
        "database_path": "timeline.db",
        "log_level": "INFO",
        "default_granularity": DEFAULT_GRANULARITY,
    }

    def __init__(self, app_dir: str):
        """Initialize the settings.

        Args:
            app_dir: The application directory path
        """
        self.app_dir = app_dir
        self.config_path = os.path.join(app_dir, self.CONFIG_FILE)
        self.values = self._load()

    def _load(self) -> Dict[str, Any]:
        """Load settings from the config file, keeping only valid values."""
        values = dict(self.DEFAULTS)
        if not os.path.exists(self.config_path):
            return values

        try:
            with open(self.config_path, 'r') as f:
                stored = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read settings from {self.config_path}: {e}")
            return values

        if not isinstance(stored, dict):
            return values

        if stored.get("theme") in THEMES:
            values["theme"] = stored["theme"]
        if isinstance(stored.get("database_path"), str) and stored["database_path"]:
            values["database_path"] = stored["database_path"]
        if str(stored.get("log_level", "")).upper() in LOG_LEVELS:
            values["log_level"] = str(stored["log_level"]).upper()
        if isinstance(stored.get("default_granularity"), int) and stored["default_granularity"] > 0:
            values["default_granularity"] = stored["default_granularity"]
        return values

    def save(self) -> None:
        """Write the settings back to the config file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.values, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")

    @property
    def theme(self) -> str:
        return self.values["theme"]

    @theme.setter
    def theme(self, value: str) -> None:
        if value not in THEMES:
            raise ValueError(f"Unknown theme: {value}")
        self.values["theme"] = value
        self.save()

    @property
    def database_path(self) -> str:
        """Absolute path of the SQLite database used by the local host."""
        path = self.values["database_path"]
        if path == ":memory:" or os.path.isabs(path):
            return path
        return os.path.join(self.app_dir, path)

    @property
    def log_level(self) -> str:
        return self.values["log_level"]

    @property
    def default_granularity(self) -> int:
        return self.values["default_granularity"]
