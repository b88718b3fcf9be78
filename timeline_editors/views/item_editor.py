#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Item Editor for the Timeline Editors application.

This module defines the dialog for adding and editing a timeline item. The
dialog renders the state of an ItemEditorController and forwards user
actions to it.
"""

import logging
from typing import List

from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel, QPushButton,
    QLineEdit, QTextEdit, QSpinBox, QFileDialog, QMessageBox, QWidget,
    QScrollArea, QTableWidget, QTableWidgetItem, QCompleter, QGroupBox,
    QHeaderView, QAbstractItemView
)
from PyQt6.QtCore import Qt, QStringListModel
from PyQt6.QtGui import QPixmap

from timeline_editors.controllers.item_editor import ItemEditorController
from timeline_editors.errors import ItemValidationError, TransportFailure
from timeline_editors.models.item import ItemFormState, Picture, StoryRef
from timeline_editors.utils.pictures import decode_picture

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = 96


def _clear_layout(layout) -> None:
    """Remove and delete every widget in a layout."""
    while layout.count():
        child = layout.takeAt(0)
        widget = child.widget()
        if widget is not None:
            widget.deleteLater()


class ItemEditorDialog(QDialog):
    """Dialog for adding and editing a timeline item."""

    def __init__(self, controller: ItemEditorController, parent=None):
        """Initialize the item editor dialog.

        Args:
            controller: Controller whose state this dialog renders
            parent: Parent widget
        """
        super().__init__(parent)
        self.controller = controller

        self.init_ui()
        self.controller.bind_view(self)

    def init_ui(self) -> None:
        """Initialize the user interface."""
        self.setWindowTitle("Timeline Item")
        self.resize(640, 760)

        main_layout = QVBoxLayout(self)

        self.position_label = QLabel()
        self.position_label.setStyleSheet("font-weight: bold;")
        main_layout.addWidget(self.position_label)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        content = QWidget()
        content_layout = QVBoxLayout(content)
        scroll.setWidget(content)
        main_layout.addWidget(scroll, 1)

        # Details
        form_layout = QFormLayout()

        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("Title")
        form_layout.addRow("Title:", self.title_edit)

        position_layout = QHBoxLayout()
        self.year_spin = QSpinBox()
        self.year_spin.setRange(-1000000, 1000000)
        self.subtick_spin = QSpinBox()
        self.subtick_spin.setRange(0, self.controller.max_subtick)
        self.year_spin.valueChanged.connect(self.update_position_label)
        self.subtick_spin.valueChanged.connect(self.update_position_label)
        position_layout.addWidget(QLabel("Year"))
        position_layout.addWidget(self.year_spin, 1)
        position_layout.addWidget(QLabel("Subtick"))
        position_layout.addWidget(self.subtick_spin)
        form_layout.addRow("Position:", position_layout)

        self.description_edit = QTextEdit()
        self.description_edit.setMaximumHeight(80)
        form_layout.addRow("Description:", self.description_edit)

        self.content_edit = QTextEdit()
        form_layout.addRow("Content:", self.content_edit)

        content_layout.addLayout(form_layout)

        # Source
        source_group = QGroupBox("Source")
        source_layout = QFormLayout(source_group)

        self.book_title_edit = QLineEdit()
        self.chapter_edit = QLineEdit()
        self.page_edit = QLineEdit()
        source_layout.addRow("Book:", self.book_title_edit)
        source_layout.addRow("Chapter:", self.chapter_edit)
        source_layout.addRow("Page:", self.page_edit)

        self.story_edit = QLineEdit()
        self.story_edit.setPlaceholderText("Start typing a story title")
        self.story_model = QStringListModel()
        self.story_completer = QCompleter(self.story_model, self)
        self.story_completer.setCaseSensitivity(Qt.CaseSensitivity.CaseInsensitive)
        self.story_edit.setCompleter(self.story_completer)
        self.story_edit.textEdited.connect(self.controller.handle_story_input)
        self.story_completer.activated.connect(self.controller.handle_story_input)
        source_layout.addRow("Story:", self.story_edit)

        self.story_id_edit = QLineEdit()
        self.story_id_edit.setReadOnly(True)
        source_layout.addRow("Story ID:", self.story_id_edit)

        content_layout.addWidget(source_group)

        # Story references
        refs_group = QGroupBox("Story References")
        refs_layout = QVBoxLayout(refs_group)

        self.story_refs_table = QTableWidget(0, 2)
        self.story_refs_table.setHorizontalHeaderLabels(["Story Title", "Story ID"])
        self.story_refs_table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeMode.Stretch)
        self.story_refs_table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.story_refs_table.setMaximumHeight(140)
        refs_layout.addWidget(self.story_refs_table)

        refs_buttons = QHBoxLayout()
        add_ref_button = QPushButton("Add Reference")
        add_ref_button.clicked.connect(self.add_story_ref)
        remove_ref_button = QPushButton("Remove Selected")
        remove_ref_button.clicked.connect(self.remove_story_ref)
        refs_buttons.addStretch()
        refs_buttons.addWidget(add_ref_button)
        refs_buttons.addWidget(remove_ref_button)
        refs_layout.addLayout(refs_buttons)

        content_layout.addWidget(refs_group)

        # Tags
        tags_group = QGroupBox("Tags")
        tags_layout = QVBoxLayout(tags_group)

        self.tag_input = QLineEdit()
        self.tag_input.setPlaceholderText("Type a tag and press Enter")
        self.tag_input.returnPressed.connect(self.add_tag)
        tags_layout.addWidget(self.tag_input)

        self.tags_container = QWidget()
        self.tags_layout = QHBoxLayout(self.tags_container)
        self.tags_layout.setContentsMargins(0, 0, 0, 0)
        self.tags_layout.setAlignment(Qt.AlignmentFlag.AlignLeft)
        tags_layout.addWidget(self.tags_container)

        content_layout.addWidget(tags_group)

        # Pictures
        pictures_group = QGroupBox("Pictures")
        pictures_layout = QVBoxLayout(pictures_group)

        add_pictures_button = QPushButton("Add Pictures...")
        add_pictures_button.clicked.connect(self.add_pictures)
        pictures_layout.addWidget(add_pictures_button, 0, Qt.AlignmentFlag.AlignLeft)

        self.pictures_container = QWidget()
        self.pictures_layout = QHBoxLayout(self.pictures_container)
        self.pictures_layout.setContentsMargins(0, 0, 0, 0)
        self.pictures_layout.setAlignment(Qt.AlignmentFlag.AlignLeft)
        pictures_layout.addWidget(self.pictures_container)

        content_layout.addWidget(pictures_group)

        # Buttons layout
        buttons_layout = QHBoxLayout()
        buttons_layout.addStretch()

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self.cancel)
        self.cancel_button.setMinimumWidth(100)

        self.save_button = QPushButton("Save")
        self.save_button.setDefault(True)
        self.save_button.clicked.connect(self.save)
        self.save_button.setMinimumWidth(100)

        buttons_layout.addWidget(self.cancel_button)
        buttons_layout.addWidget(self.save_button)
        main_layout.addLayout(buttons_layout)

    # Rendering

    def render_form(self, form: ItemFormState) -> None:
        """Show the form values of the item."""
        self.setWindowTitle("Edit Timeline Item" if self.controller.is_edit else "Add Timeline Item")
        self.title_edit.setText(form.title)
        self.description_edit.setPlainText(form.description)
        self.content_edit.setPlainText(form.content)
        self.book_title_edit.setText(form.book_title)
        self.chapter_edit.setText(form.chapter)
        self.page_edit.setText(form.page)
        self.story_edit.setText(form.story)
        self.story_id_edit.setText(form.story_id)
        self.render_story_refs(form.story_refs)

    def render_position(self, year: int, subtick: int, max_subtick: int) -> None:
        """Show the item's position on the timeline."""
        self.subtick_spin.setMaximum(max_subtick)
        self.year_spin.setValue(year)
        self.subtick_spin.setValue(subtick)
        self.update_position_label()

    def update_position_label(self, *args) -> None:
        self.position_label.setText(f"Year {self.year_spin.value()}, subtick {self.subtick_spin.value()}")

    def render_pictures(self, pictures: List[Picture]) -> None:
        """Rebuild the picture thumbnails."""
        _clear_layout(self.pictures_layout)

        for index, picture in enumerate(pictures):
            tile = QWidget()
            tile_layout = QVBoxLayout(tile)
            tile_layout.setContentsMargins(2, 2, 2, 2)

            thumbnail = QLabel()
            thumbnail.setFixedSize(THUMBNAIL_SIZE, THUMBNAIL_SIZE)
            thumbnail.setAlignment(Qt.AlignmentFlag.AlignCenter)
            thumbnail.setToolTip(picture.title)
            try:
                _, data = decode_picture(picture.picture)
                pixmap = QPixmap()
                if pixmap.loadFromData(data):
                    thumbnail.setPixmap(pixmap.scaled(
                        THUMBNAIL_SIZE, THUMBNAIL_SIZE,
                        Qt.AspectRatioMode.KeepAspectRatio,
                        Qt.TransformationMode.SmoothTransformation
                    ))
                else:
                    thumbnail.setText("?")
            except ValueError as e:
                logger.warning(f"Could not show picture {index + 1}: {e}")
                thumbnail.setText("?")
            tile_layout.addWidget(thumbnail)

            remove_button = QPushButton("Remove")
            remove_button.clicked.connect(lambda checked=False, i=index: self.controller.remove_picture(i))
            tile_layout.addWidget(remove_button)

            self.pictures_layout.addWidget(tile)

    def render_tags(self, tags: List[str]) -> None:
        """Rebuild the tag buttons."""
        _clear_layout(self.tags_layout)
        for tag in tags:
            tag_button = QPushButton(f"{tag}  ×")
            tag_button.setToolTip("Remove tag")
            tag_button.clicked.connect(lambda checked=False, t=tag: self.controller.remove_tag(t))
            self.tags_layout.addWidget(tag_button)

    def render_story_suggestions(self, titles: List[str]) -> None:
        """Offer matching story titles and show the resolved story id."""
        self.story_model.setStringList(titles)
        self.story_id_edit.setText(self.controller.form.story_id)

    def render_story_refs(self, refs: List[StoryRef]) -> None:
        self.story_refs_table.setRowCount(len(refs))
        for row, ref in enumerate(refs):
            self.story_refs_table.setItem(row, 0, QTableWidgetItem(ref.story_title))
            self.story_refs_table.setItem(row, 1, QTableWidgetItem(ref.story_id))

    # Reading

    def read_story_refs(self) -> List[StoryRef]:
        refs = []
        for row in range(self.story_refs_table.rowCount()):
            title_item = self.story_refs_table.item(row, 0)
            id_item = self.story_refs_table.item(row, 1)
            refs.append(StoryRef(
                story_title=title_item.text() if title_item else "",
                story_id=id_item.text() if id_item else "",
            ))
        return refs

    def read_form(self) -> ItemFormState:
        """Read the current widget values."""
        current = self.controller.form
        return ItemFormState(
            id=current.id,
            title=self.title_edit.text(),
            description=self.description_edit.toPlainText(),
            content=self.content_edit.toPlainText(),
            year=self.year_spin.value(),
            subtick=self.subtick_spin.value(),
            book_title=self.book_title_edit.text(),
            chapter=self.chapter_edit.text(),
            page=self.page_edit.text(),
            story=self.story_edit.text(),
            story_id=current.story_id,
            tags=list(current.tags),
            story_refs=self.read_story_refs(),
        )

    # Actions

    def add_tag(self) -> None:
        if self.controller.add_tag(self.tag_input.text()):
            self.tag_input.clear()

    def add_story_ref(self) -> None:
        self.controller.update_form(self.read_form())
        self.controller.add_story_ref()
        self.render_story_refs(self.controller.form.story_refs)
        self.story_refs_table.editItem(self.story_refs_table.item(self.story_refs_table.rowCount() - 1, 0))

    def remove_story_ref(self) -> None:
        row = self.story_refs_table.currentRow()
        if row < 0:
            return
        self.controller.update_form(self.read_form())
        self.controller.remove_story_ref(row)
        self.render_story_refs(self.controller.form.story_refs)

    def add_pictures(self) -> None:
        """Let the user choose image files to attach."""
        paths, _ = QFileDialog.getOpenFileNames(
            self,
            "Add Pictures",
            "",
            "Images (*.png *.jpg *.jpeg *.gif *.bmp *.webp)"
        )
        if not paths:
            return

        added = self.controller.add_pictures(paths)
        if added < len(paths):
            QMessageBox.warning(
                self,
                "Pictures Skipped",
                f"{len(paths) - added} of {len(paths)} files could not be read as images."
            )

    def save(self) -> None:
        """Save the item and close the dialog."""
        try:
            self.controller.save(self.read_form())
        except ItemValidationError as e:
            QMessageBox.warning(self, "Missing Information", str(e))
            if e.field == 'title':
                self.title_edit.setFocus()
            return
        except TransportFailure as e:
            QMessageBox.critical(self, "Error Saving Item", f"Error saving item: {e}")
            return
        self.accept()

    def cancel(self) -> None:
        self.controller.cancel()
        self.reject()

    def done(self, result: int) -> None:
        """Tell the host the editor is closing; unsaved edits are dropped."""
        self.controller.close()
        super().done(result)
