#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Main entry point for the Timeline Editors application.

This module sets up logging, settings and the local host, and opens either
the relationship editor or the timeline item editor.
"""

import sys
import os
import argparse
import logging
from typing import List, Optional

from timeline_editors.errors import InitializationFailure
from timeline_editors.host import Database, LocalHost
from timeline_editors.utils.settings import EditorSettings, THEMES


def _setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration for the application.

    Configures logging to output to both console and a log file.

    Args:
        log_level: Minimum level shown on the console
    """
    # Create logs directory if it doesn't exist
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "logs")
    os.makedirs(log_dir, exist_ok=True)

    log_file = os.path.join(log_dir, "timeline_editors.log")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler for all logs
    file_handler = logging.FileHandler(log_file, mode='a')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

    # Console handler for the configured level and above
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, log_level, logging.INFO))
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info("Logging initialized")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="timeline-editors",
        description="Edit character relationships and timeline items."
    )
    parser.add_argument("--db", help="Path of the SQLite database (default from editor_config.json)")
    parser.add_argument("--theme", choices=THEMES, help="Theme to use and remember")

    subparsers = parser.add_subparsers(dest="command", required=True)

    relationship_parser = subparsers.add_parser("relationship", help="Open the relationship editor")
    relationship_parser.add_argument("--timeline", type=int, required=True, help="Timeline ID")
    relationship_parser.add_argument("--character1", type=int, required=True, help="ID of the first character")
    relationship_parser.add_argument("--character2", type=int, required=True, help="ID of the second character")
    relationship_parser.add_argument("--relationship", type=int, help="ID of a relationship to edit")

    item_parser = subparsers.add_parser("item", help="Open the timeline item editor")
    item_parser.add_argument("--timeline", type=int, required=True, help="Timeline ID")
    item_parser.add_argument("--item", type=int, help="ID of an item to edit")
    item_parser.add_argument("--year", type=int, default=0, help="Year of a new item")
    item_parser.add_argument("--subtick", type=int, default=0, help="Subtick of a new item")
    item_parser.add_argument("--granularity", type=int, help="Subticks per year")

    seed_parser = subparsers.add_parser("seed", help="Create a demo timeline with two characters")
    seed_parser.add_argument("--title", default="Demo Timeline", help="Title of the timeline")

    return parser


def seed_demo_data(host: LocalHost, title: str) -> None:
    """Fill the database with a timeline the editors can be tried on."""
    timeline_id = host.create_timeline(title)
    alice_id = host.create_character("Alice", timeline_id, color="#2d5016")
    bob_id = host.create_character("Bob", timeline_id, color="#1f4e79")
    host.create_story("The Beginning", timeline_id)
    logging.info(f"Created timeline {timeline_id} with characters {alice_id} (Alice) and {bob_id} (Bob)")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    app_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..")
    settings = EditorSettings(app_dir)

    _setup_logging(settings.log_level)
    args = build_parser().parse_args(argv)

    logging.info("Starting Timeline Editors...")

    db_path = args.db or settings.database_path
    logging.info(f"Database path: {db_path}")
    database = Database(db_path)
    database.create_tables()
    host = LocalHost(database)

    if args.command == "seed":
        seed_demo_data(host, args.title)
        return 0

    # Qt is only needed once a window is opened
    from PyQt6.QtWidgets import QApplication
    from timeline_editors.controllers import RelationshipEditorController, ItemEditorController
    from timeline_editors.utils.theme_manager import ThemeManager
    from timeline_editors.views import RelationshipEditorDialog, ItemEditorDialog

    logging.info("Creating QApplication instance...")
    app = QApplication(sys.argv if argv is None else [sys.argv[0]] + list(argv))

    theme_manager = ThemeManager(settings)
    theme_manager.apply_theme(args.theme)

    if args.command == "relationship":
        host.open_relationship_editor(args.character1, args.character2, args.timeline, args.relationship)
        controller = RelationshipEditorController(host.bridge)
        try:
            controller.initialize()
        except InitializationFailure as e:
            logging.error(f"Relationship editor could not start: {e}")
            return 1
        dialog = RelationshipEditorDialog(controller)
    else:
        host.current_timeline_id = args.timeline
        controller = ItemEditorController(host.bridge, default_granularity=settings.default_granularity)
        dialog = ItemEditorDialog(controller)
        if args.item is not None:
            if not controller.load_item(args.item, args.granularity):
                return 1
        else:
            controller.set_item(None)
            controller.set_position(args.year, args.subtick, args.granularity)

    logging.info("Showing editor window...")
    dialog.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
