"""
Main Toolbar

Primary application toolbar with file, navigation, zoom and rotation actions.
"""

from __future__ import annotations
from typing import Optional

from PyQt6.QtWidgets import (
    QToolBar,
    QWidget,
    QSpinBox,
    QLabel,
)
from PyQt6.QtCore import pyqtSignal
from PyQt6.QtGui import QAction


class MainToolBar(QToolBar):
    """
    Main application toolbar.

    Signals:
        open_clicked: Emitted when open button is clicked
        export_clicked: Emitted when export button is clicked
        page_changed: Emitted when page number is changed (0-based)
    """

    open_clicked = pyqtSignal()
    export_clicked = pyqtSignal()
    page_changed = pyqtSignal(int)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Main Toolbar", parent)
        self.setObjectName("MainToolBar")

        self.setMovable(True)
        self.setFloatable(False)

        self._setup_actions()
        self._setup_widgets()
        self.set_document_actions_enabled(False)

    def _setup_actions(self) -> None:
        """Set up toolbar actions."""
        self._action_open = QAction("Open", self)
        self._action_open.setToolTip("Open PDF file (Ctrl+O)")
        self._action_open.triggered.connect(self.open_clicked.emit)
        self.addAction(self._action_open)

        self._action_export = QAction("Export", self)
        self._action_export.setToolTip("Export annotated PDF (Ctrl+S)")
        self._action_export.triggered.connect(self.export_clicked.emit)
        self.addAction(self._action_export)

        self.addSeparator()

        self._action_prev = QAction("Previous", self)
        self._action_prev.setToolTip("Go to previous page")
        self.addAction(self._action_prev)

    def _setup_widgets(self) -> None:
        """Set up toolbar widgets."""
        self._page_spin = QSpinBox()
        self._page_spin.setMinimum(1)
        self._page_spin.setMaximum(1)
        self._page_spin.setToolTip("Current page")
        self._page_spin.valueChanged.connect(lambda v: self.page_changed.emit(v - 1))
        self.addWidget(self._page_spin)

        self._page_label = QLabel(" / 1")
        self.addWidget(self._page_label)

        self._action_next = QAction("Next", self)
        self._action_next.setToolTip("Go to next page")
        self.addAction(self._action_next)

        self.addSeparator()

        self._action_zoom_out = QAction("-", self)
        self._action_zoom_out.setToolTip("Zoom out")
        self.addAction(self._action_zoom_out)

        self._zoom_label = QLabel("130%")
        self._zoom_label.setMinimumWidth(48)
        self.addWidget(self._zoom_label)

        self._action_zoom_in = QAction("+", self)
        self._action_zoom_in.setToolTip("Zoom in")
        self.addAction(self._action_zoom_in)

        self.addSeparator()

        self._action_rotate_left = QAction("Rotate Left", self)
        self._action_rotate_left.setToolTip("Rotate the exported document left")
        self.addAction(self._action_rotate_left)

        self._action_rotate_right = QAction("Rotate Right", self)
        self._action_rotate_right.setToolTip("Rotate the exported document right")
        self.addAction(self._action_rotate_right)

        self._rotation_label = QLabel(" 0°")
        self.addWidget(self._rotation_label)

    def set_document_actions_enabled(self, enabled: bool) -> None:
        """Enable or disable everything that needs a loaded document."""
        for action in (
            self._action_export,
            self._action_prev,
            self._action_next,
            self._action_zoom_in,
            self._action_zoom_out,
            self._action_rotate_left,
            self._action_rotate_right,
        ):
            action.setEnabled(enabled)
        self._page_spin.setEnabled(enabled)

    def set_page_count(self, count: int) -> None:
        """Set the total page count."""
        self._page_spin.blockSignals(True)
        self._page_spin.setMaximum(max(count, 1))
        self._page_spin.blockSignals(False)
        self._page_label.setText(f" / {count}")

    def set_current_page(self, page: int) -> None:
        """Set the current page (0-based)."""
        self._page_spin.blockSignals(True)
        self._page_spin.setValue(page + 1)
        self._page_spin.blockSignals(False)

    def set_zoom_level(self, zoom: float) -> None:
        """Set the current zoom level."""
        self._zoom_label.setText(f"{round(zoom * 100)}%")

    def set_rotation(self, rotation: int) -> None:
        self._rotation_label.setText(f" {rotation}°")

    def get_prev_action(self) -> QAction:
        """Get the previous page action."""
        return self._action_prev

    def get_next_action(self) -> QAction:
        """Get the next page action."""
        return self._action_next

    def get_zoom_in_action(self) -> QAction:
        """Get the zoom in action."""
        return self._action_zoom_in

    def get_zoom_out_action(self) -> QAction:
        """Get the zoom out action."""
        return self._action_zoom_out

    def get_rotate_left_action(self) -> QAction:
        """Get the rotate left action."""
        return self._action_rotate_left

    def get_rotate_right_action(self) -> QAction:
        """Get the rotate right action."""
        return self._action_rotate_right
