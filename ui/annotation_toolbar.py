"""
Annotation Toolbar

Toolbar for the editor modes: text selection, text boxes and eraser.
"""

from __future__ import annotations
from typing import Optional

from PyQt6.QtWidgets import (
    QToolBar,
    QWidget,
    QToolButton,
)
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QAction, QActionGroup, QColor, QIcon, QPixmap, QPainter

from models.overlay import ColorTag
from models.view_state import EditorMode


def color_tag_icon(color_tag: ColorTag, size: int = 20) -> QIcon:
    """Square swatch icon for a highlight color."""
    pixmap = QPixmap(size, size)
    pixmap.fill(QColor(color_tag.color.to_hex()))

    # Draw border
    painter = QPainter(pixmap)
    painter.setPen(Qt.GlobalColor.black)
    painter.drawRect(0, 0, size - 1, size - 1)
    painter.end()

    return QIcon(pixmap)


class ColorTagButton(QToolButton):
    """Button that shows one highlight color and reports it when clicked."""

    color_selected = pyqtSignal(object)  # ColorTag

    def __init__(self, color_tag: ColorTag, parent: Optional[QWidget] = None):
        super().__init__(parent)

        self._color_tag = color_tag
        self.setIcon(color_tag_icon(color_tag))
        self.setToolTip(color_tag.label)
        self.setAutoRaise(True)

        self.clicked.connect(lambda: self.color_selected.emit(self._color_tag))

    @property
    def color_tag(self) -> ColorTag:
        return self._color_tag


class AnnotationToolBar(QToolBar):
    """
    Annotation toolbar with the three editor modes.

    Signals:
        mode_selected: Emitted when a mode is selected (EditorMode)
    """

    mode_selected = pyqtSignal(object)

    _MODE_LABELS = {
        EditorMode.SELECT: ("Select", "Select text to highlight (S)", "S"),
        EditorMode.ADD_TEXT: ("Add Text", "Click on a page to add a text box (T)", "T"),
        EditorMode.ERASE: ("Eraser", "Click an overlay to remove it (E)", "E"),
    }

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Annotation Toolbar", parent)
        self.setObjectName("AnnotationToolBar")

        self.setMovable(True)
        self.setFloatable(False)

        self._current_mode = EditorMode.SELECT
        self._mode_actions: dict[EditorMode, QAction] = {}

        self._setup_modes()

    def _setup_modes(self) -> None:
        """Set up one exclusive, checkable action per mode."""
        group = QActionGroup(self)
        group.setExclusive(True)

        for mode, (text, tooltip, shortcut) in self._MODE_LABELS.items():
            action = QAction(text, self)
            action.setCheckable(True)
            action.setShortcut(shortcut)
            action.setToolTip(tooltip)
            action.triggered.connect(lambda checked, m=mode: self._on_mode_selected(m))
            group.addAction(action)
            self.addAction(action)
            self._mode_actions[mode] = action

        self._mode_actions[EditorMode.SELECT].setChecked(True)

    def _on_mode_selected(self, mode: EditorMode) -> None:
        """Handle mode selection."""
        if mode == self._current_mode:
            return
        self._current_mode = mode
        self.mode_selected.emit(mode)

    @property
    def current_mode(self) -> EditorMode:
        """Get the currently selected mode."""
        return self._current_mode

    def set_mode(self, mode: EditorMode) -> None:
        """Check a mode's action without emitting."""
        self._current_mode = mode
        self._mode_actions[mode].setChecked(True)
