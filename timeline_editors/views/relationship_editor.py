#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Relationship Editor for the Timeline Editors application.

This module defines the dialog for creating and editing a relationship
between two characters. The dialog only shows and reads form values; the
decisions are made by RelationshipEditorController.
"""

import logging
from typing import Optional

from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QLabel, QPushButton,
    QComboBox, QLineEdit, QCheckBox, QSlider, QTextEdit, QMessageBox, QWidget
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QFont

from timeline_editors.controllers.relationship_editor import (
    RelationshipEditorController, SubmitOutcome, arrow_for
)
from timeline_editors.models.relationship import (
    RelationshipFormState, DEFAULT_STRENGTH, MIN_STRENGTH, MAX_STRENGTH
)
from timeline_editors.relationships import (
    RELATIONSHIP_TYPES_BY_CATEGORY, RELATIONSHIP_DEGREES, RELATIONSHIP_MODIFIERS,
    CUSTOM_TYPE_MAX_LENGTH, custom_type_problem, is_custom_type, relationship_type_label
)

logger = logging.getLogger(__name__)


class RelationshipTypeComboBox(QComboBox):
    """A ComboBox listing relationship types under category headers."""

    def __init__(self, parent=None):
        """Initialize the combo box and fill it with every relationship type.

        Args:
            parent: Parent widget
        """
        super().__init__(parent)
        self.setMinimumHeight(30)

        self.addItem("Select a relationship type...", "")
        for category, types in RELATIONSHIP_TYPES_BY_CATEGORY.items():
            self.addCategoryItem(str(category))
            for relationship_type in types:
                self.addItem(f"    {relationship_type_label(relationship_type).title()}", relationship_type)

    def addCategoryItem(self, category_name: str) -> None:
        """Add a non-selectable category header item.

        Args:
            category_name: Name of the category
        """
        index = self.count()
        self.addItem(f"▼ {category_name}", None)

        model = self.model()
        item = model.item(index) if model is not None else None
        if item is None:
            logger.warning(f"Category item at index {index} is missing")
            return

        item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsSelectable & ~Qt.ItemFlag.ItemIsEnabled)
        item.setForeground(QColor("#9932CC"))
        font = item.font()
        font.setBold(True)
        item.setFont(font)

    def selected_type(self) -> str:
        return self.currentData() or ""

    def select_type(self, relationship_type: str) -> None:
        """Select a type by its tag, or the placeholder if it is unknown."""
        index = self.findData(relationship_type) if relationship_type else 0
        self.setCurrentIndex(index if index >= 0 else 0)


class RelationshipEditorDialog(QDialog):
    """Dialog for creating and editing a relationship between two characters."""

    def __init__(self, controller: RelationshipEditorController, parent=None):
        """Initialize the relationship editor dialog.

        Args:
            controller: Initialized controller driving this dialog
            parent: Parent widget
        """
        super().__init__(parent)
        self.controller = controller
        self.session = controller.session

        self.init_ui()
        self.setup_character_display()
        self.write_form(controller.initial_form())
        self.save_button.setText(self.session.save_button_text)

    def init_ui(self) -> None:
        """Initialize the user interface."""
        self.setWindowTitle("Edit Relationship" if self.session.is_edit else "New Relationship")
        self.resize(520, 560)

        main_layout = QVBoxLayout(self)

        # Header with both characters and the direction arrow
        header = QWidget()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(0, 0, 0, 8)

        self.character1_label = QLabel()
        self.character2_label = QLabel()
        self.arrow_label = QLabel("→")
        self.arrow_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        arrow_font = QFont()
        arrow_font.setPointSize(20)
        arrow_font.setBold(True)
        self.arrow_label.setFont(arrow_font)

        header_layout.addWidget(self.character1_label, 1)
        header_layout.addWidget(self.arrow_label)
        header_layout.addWidget(self.character2_label, 1)
        main_layout.addWidget(header)

        # Form
        form_layout = QFormLayout()

        self.type_combo = RelationshipTypeComboBox()
        self.type_combo.currentIndexChanged.connect(self.handle_relationship_type_change)
        form_layout.addRow("Relationship:", self.type_combo)

        self.custom_type_edit = QLineEdit()
        self.custom_type_edit.setPlaceholderText("Describe the relationship")
        self.custom_type_edit.setMaxLength(CUSTOM_TYPE_MAX_LENGTH + 1)
        self.custom_type_edit.textChanged.connect(self.validate_custom_type)
        self.custom_type_edit.setVisible(False)
        form_layout.addRow("", self.custom_type_edit)

        self.custom_type_warning = QLabel()
        self.custom_type_warning.setStyleSheet("color: #e06c75;")
        self.custom_type_warning.setVisible(False)
        form_layout.addRow("", self.custom_type_warning)

        self.bidirectional_checkbox = QCheckBox("Relationship goes both ways")
        self.bidirectional_checkbox.toggled.connect(self.handle_bidirectional_change)
        form_layout.addRow("", self.bidirectional_checkbox)

        self.degree_combo = QComboBox()
        self.degree_combo.addItem("None", "")
        for degree in RELATIONSHIP_DEGREES:
            self.degree_combo.addItem(relationship_type_label(degree).title(), degree)
        form_layout.addRow("Degree:", self.degree_combo)

        self.modifier_combo = QComboBox()
        self.modifier_combo.addItem("None", "")
        for modifier in RELATIONSHIP_MODIFIERS:
            self.modifier_combo.addItem(modifier.title(), modifier)
        form_layout.addRow("Modifier:", self.modifier_combo)

        strength_layout = QHBoxLayout()
        self.strength_slider = QSlider(Qt.Orientation.Horizontal)
        self.strength_slider.setRange(MIN_STRENGTH, MAX_STRENGTH)
        self.strength_slider.setValue(DEFAULT_STRENGTH)
        self.strength_value_label = QLabel(str(DEFAULT_STRENGTH))
        self.strength_value_label.setMinimumWidth(30)
        self.strength_slider.valueChanged.connect(lambda value: self.strength_value_label.setText(str(value)))
        strength_layout.addWidget(self.strength_slider, 1)
        strength_layout.addWidget(self.strength_value_label)
        form_layout.addRow("Strength:", strength_layout)

        self.notes_edit = QTextEdit()
        self.notes_edit.setPlaceholderText("Notes about this relationship")
        form_layout.addRow("Notes:", self.notes_edit)

        main_layout.addLayout(form_layout)

        # Buttons layout
        buttons_layout = QHBoxLayout()
        buttons_layout.addStretch()

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.clicked.connect(self.reject)
        self.cancel_button.setMinimumWidth(100)

        self.save_button = QPushButton("Save Relationship")
        self.save_button.setDefault(True)
        self.save_button.clicked.connect(self.handle_form_submit)
        self.save_button.setMinimumWidth(140)

        buttons_layout.addWidget(self.cancel_button)
        buttons_layout.addWidget(self.save_button)
        main_layout.addLayout(buttons_layout)

        self.setModal(True)

    def setup_character_display(self) -> None:
        """Show the character names, accented with the first character's colour."""
        accent = self.session.accent_color
        self.character1_label.setText(self.session.character1_name)
        self.character2_label.setText(self.session.character2_name)

        self.character1_label.setStyleSheet(
            f"font-weight: bold; padding: 6px; border: 2px solid {accent}; "
            f"border-radius: 5px; background-color: {accent}33;"
        )
        self.character2_label.setStyleSheet("font-weight: bold; padding: 6px;")
        self.arrow_label.setStyleSheet(f"color: {accent};")
        self.save_button.setStyleSheet(f"background-color: {accent};")

    # Projection between widgets and form state

    def read_form(self) -> RelationshipFormState:
        """Read the current widget values."""
        return RelationshipFormState(
            relationship_type=self.type_combo.selected_type(),
            custom_relationship_type=self.custom_type_edit.text(),
            is_bidirectional=self.bidirectional_checkbox.isChecked(),
            relationship_degree=self.degree_combo.currentData() or "",
            relationship_modifier=self.modifier_combo.currentData() or "",
            relationship_strength=self.strength_slider.value(),
            notes=self.notes_edit.toPlainText(),
        )

    def write_form(self, form: RelationshipFormState) -> None:
        """Show form values in the widgets without re-running type handling.

        Args:
            form: Values to show
        """
        self.type_combo.blockSignals(True)
        self.type_combo.select_type(form.relationship_type)
        self.type_combo.blockSignals(False)

        self.custom_type_edit.setText(form.custom_relationship_type)
        self.custom_type_edit.setVisible(is_custom_type(form.relationship_type))
        self.bidirectional_checkbox.setChecked(form.is_bidirectional)
        self._select_data(self.degree_combo, form.relationship_degree)
        self._select_data(self.modifier_combo, form.relationship_modifier)
        self.strength_slider.setValue(
            form.relationship_strength if form.relationship_strength is not None else DEFAULT_STRENGTH
        )
        self.notes_edit.setPlainText(form.notes)
        self.handle_bidirectional_change()

    def _select_data(self, combo: QComboBox, value: str) -> None:
        """Select a qualifier, adding it first if the host sent an unlisted one."""
        index = combo.findData(value)
        if index < 0:
            combo.addItem(value, value)
            index = combo.count() - 1
        combo.setCurrentIndex(index)

    # Handlers

    def handle_relationship_type_change(self, index: int) -> None:
        """Apply the selected type's default direction and show the custom field."""
        if self.type_combo.itemData(index) is None:
            return

        form = self.controller.on_type_changed(self.read_form(), self.type_combo.selected_type())
        self.write_form(form)
        if is_custom_type(form.relationship_type):
            self.custom_type_edit.setFocus()

    def handle_bidirectional_change(self, *args) -> None:
        """Show a double arrow for bidirectional relationships."""
        self.arrow_label.setText(arrow_for(self.bidirectional_checkbox.isChecked()))

    def validate_custom_type(self, text: str) -> None:
        """Show the length problem of the custom type text, if any."""
        problem = custom_type_problem(text)
        self.custom_type_warning.setText(problem or "")
        self.custom_type_warning.setVisible(problem is not None)

    def confirm_duplicate(self, question: str) -> bool:
        """Ask whether to create a relationship that already exists."""
        reply = QMessageBox.question(
            self,
            "Relationship Already Exists",
            question,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No
        )
        return reply == QMessageBox.StandardButton.Yes

    def handle_form_submit(self) -> None:
        """Validate and save the relationship, closing the dialog on success."""
        self.save_button.setEnabled(False)
        self.save_button.setText("Saving...")
        try:
            result = self.controller.submit(self.read_form(), self.confirm_duplicate)
        finally:
            self.save_button.setEnabled(True)
            self.save_button.setText(self.session.save_button_text)

        if result.outcome is SubmitOutcome.CLOSED:
            self.accept()
        elif result.outcome is SubmitOutcome.INVALID:
            QMessageBox.warning(self, "Invalid Relationship", result.message)
            self._focus_field(result.field)
        elif result.outcome is SubmitOutcome.FAILED:
            QMessageBox.critical(self, "Error Saving Relationship", result.message)

    def _focus_field(self, field: Optional[str]) -> None:
        widgets = {
            'relationship_type': self.type_combo,
            'custom_relationship_type': self.custom_type_edit,
        }
        widget = widgets.get(field)
        if widget is not None:
            widget.setFocus()

    def done(self, result: int) -> None:
        """Drop the controller's subscriptions when the dialog closes.

        Closing never asks about unsaved edits.
        """
        self.controller.close()
        super().done(result)
