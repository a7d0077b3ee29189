"""
Thumbnail Panel

Sidebar listing a small rendering of every page; clicking one scrolls the
viewer there and the page in view stays selected.
"""

from __future__ import annotations
from typing import Optional
import logging

from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QListWidget,
    QListWidgetItem,
    QLabel,
)
from PyQt6.QtCore import Qt, QSize, pyqtSignal
from PyQt6.QtGui import QIcon, QPixmap

from core.pdf_engine import PDFDocument, PDFEngine
from ui.viewer_widget import fitz_pixmap_to_qimage

logger = logging.getLogger(__name__)


class ThumbnailPanel(QWidget):
    """
    Page thumbnail sidebar.

    Signals:
        page_selected: Emitted when a thumbnail is clicked (0-based page)
    """

    page_selected = pyqtSignal(int)

    THUMBNAIL_SCALE = 0.29

    def __init__(self, pdf_engine: Optional[PDFEngine] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._pdf_engine = pdf_engine or PDFEngine()
        self._setup_ui()

    def _setup_ui(self) -> None:
        """Set up the panel UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QLabel("Pages")
        header.setContentsMargins(8, 4, 8, 4)
        layout.addWidget(header)

        self._list = QListWidget()
        self._list.setViewMode(QListWidget.ViewMode.ListMode)
        self._list.setFlow(QListWidget.Flow.TopToBottom)
        self._list.setIconSize(QSize(180, 232))
        self._list.setSpacing(4)
        self._list.setUniformItemSizes(True)
        self._list.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self._list)

    @property
    def count(self) -> int:
        return self._list.count()

    @property
    def current_page(self) -> int:
        return self._list.currentRow()

    def set_document(self, document: PDFDocument) -> None:
        """Render one thumbnail per page of ``document``."""
        self.clear()

        for page_number in range(document.page_count):
            item = QListWidgetItem(f"Page {page_number + 1}")
            item.setData(Qt.ItemDataRole.UserRole, page_number)

            result = self._pdf_engine.render_page_to_pixmap(
                document,
                page_number,
                scale=self.THUMBNAIL_SCALE,
            )
            if result.is_failure():
                result.get_error().log(logger)
            else:
                item.setIcon(QIcon(QPixmap.fromImage(fitz_pixmap_to_qimage(result.unwrap()))))

            self._list.addItem(item)

        self.set_current_page(0)
        logger.debug(f"Rendered {self._list.count()} thumbnails")

    def clear(self) -> None:
        self._list.clear()

    def set_current_page(self, page: int) -> None:
        """Mark the page in view without emitting page_selected."""
        if not 0 <= page < self._list.count():
            return
        self._list.blockSignals(True)
        self._list.setCurrentRow(page)
        self._list.blockSignals(False)
        self._list.scrollToItem(self._list.item(page))

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        self.page_selected.emit(item.data(Qt.ItemDataRole.UserRole))
