"""
Highlight Popup

Small floating row of color swatches shown above a pending text selection.
"""

from __future__ import annotations
from typing import Optional

from PyQt6.QtWidgets import QFrame, QHBoxLayout, QWidget
from PyQt6.QtCore import QPoint, pyqtSignal

from models.overlay import ColorTag
from ui.annotation_toolbar import ColorTagButton


class HighlightPopup(QFrame):
    """
    Color picker for the pending selection.

    Signals:
        color_selected: Emitted with the chosen ColorTag
    """

    color_selected = pyqtSignal(object)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setAutoFillBackground(True)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 2, 4, 2)
        layout.setSpacing(2)

        for color_tag in ColorTag:
            button = ColorTagButton(color_tag, self)
            button.color_selected.connect(self.color_selected.emit)
            layout.addWidget(button)

        self.adjustSize()
        self.hide()

    def show_at(self, anchor: QPoint) -> None:
        """Show the popup with its top-left corner at ``anchor``, kept inside the parent."""
        parent = self.parentWidget()
        x, y = anchor.x(), anchor.y()
        if parent is not None:
            x = max(0, min(x, parent.width() - self.width()))
            y = max(0, min(y, parent.height() - self.height()))
        self.move(x, y)
        self.show()
        self.raise_()
