"""
Main Window

The application window: toolbars, the viewer, and the open/export flow.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional
import logging

from PyQt6.QtWidgets import (
    QMainWindow,
    QWidget,
    QMenu,
    QStatusBar,
    QFileDialog,
    QMessageBox,
    QLabel,
    QSplitter,
)
from PyQt6.QtCore import Qt, QSettings, pyqtSignal
from PyQt6.QtGui import QAction, QKeySequence

from core.bake_engine import BakeOptions, BakeResult, DocumentBakeEngine
from core.document_manager import DocumentManager
from core.error_types import AppError
from core.pdf_engine import PDFDocument
from models.settings import AppSettings
from models.view_state import EditorMode
from services.bake_service import BakeService
from ui.annotation_toolbar import AnnotationToolBar
from ui.thumbnail_panel import ThumbnailPanel
from ui.toolbar import MainToolBar
from ui.viewer_widget import ViewerWidget
from utils.validators import validate_file_path

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """
    Main application window.

    Owns the document manager and the bake service and wires them to the
    viewer. Overlays live only as long as the loaded document does.

    Signals:
        document_opened: Emitted when a document is opened (name)
        document_closed: Emitted when the document is released
    """

    document_opened = pyqtSignal(str)
    document_closed = pyqtSignal()

    def __init__(
        self,
        app_settings: Optional[AppSettings] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)

        self._app_settings = app_settings or AppSettings()
        self._settings = QSettings()

        annotation = self._app_settings.annotation
        self._document_manager = DocumentManager()
        self._bake_service = BakeService(DocumentBakeEngine(BakeOptions(
            highlight_opacity=annotation.highlight_opacity,
            font_size=annotation.text_font_size,
            font_name=annotation.text_font_name,
            output_name=annotation.output_file_name,
        )))

        self._setup_ui()
        self._create_menus()
        self._create_toolbars()
        self._create_statusbar()
        self._connect_signals()
        self._restore_state()
        self._update_actions_state()

    def _setup_ui(self) -> None:
        """Set up the main UI layout."""
        self._viewer = ViewerWidget(
            viewer_settings=self._app_settings.viewer,
            annotation_settings=self._app_settings.annotation,
            pdf_engine=self._document_manager.pdf_engine,
        )

        self._thumbnail_panel = ThumbnailPanel(pdf_engine=self._document_manager.pdf_engine)
        self._thumbnail_panel.setMinimumWidth(200)
        self._thumbnail_panel.setVisible(False)

        # Thumbnails (left) and viewer (center)
        self._main_splitter = QSplitter(Qt.Orientation.Horizontal)
        self._main_splitter.addWidget(self._thumbnail_panel)
        self._main_splitter.addWidget(self._viewer)
        self._main_splitter.setStretchFactor(1, 1)
        self._main_splitter.setSizes([220, 980])
        self.setCentralWidget(self._main_splitter)

    def _create_menus(self) -> None:
        """Create the menu bar and menus."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        self._action_open = QAction("&Open...", self)
        self._action_open.setShortcut(QKeySequence.StandardKey.Open)
        self._action_open.triggered.connect(self._on_open)
        file_menu.addAction(self._action_open)

        self._action_export = QAction("&Export Annotated PDF...", self)
        self._action_export.setShortcut(QKeySequence.StandardKey.Save)
        self._action_export.triggered.connect(self._on_export)
        file_menu.addAction(self._action_export)

        self._action_close = QAction("&Close", self)
        self._action_close.setShortcut(QKeySequence.StandardKey.Close)
        self._action_close.triggered.connect(self._on_close_document)
        file_menu.addAction(self._action_close)

        file_menu.addSeparator()

        action_exit = QAction("E&xit", self)
        action_exit.setShortcut(QKeySequence.StandardKey.Quit)
        action_exit.triggered.connect(self.close)
        file_menu.addAction(action_exit)

        # View menu
        view_menu = menubar.addMenu("&View")

        self._action_zoom_in = QAction("Zoom &In", self)
        self._action_zoom_in.setShortcut(QKeySequence.StandardKey.ZoomIn)
        self._action_zoom_in.triggered.connect(self._viewer.zoom_in)
        view_menu.addAction(self._action_zoom_in)

        self._action_zoom_out = QAction("Zoom &Out", self)
        self._action_zoom_out.setShortcut(QKeySequence.StandardKey.ZoomOut)
        self._action_zoom_out.triggered.connect(self._viewer.zoom_out)
        view_menu.addAction(self._action_zoom_out)

        view_menu.addSeparator()

        self._action_rotate_left = QAction("Rotate &Left", self)
        self._action_rotate_left.setShortcut(QKeySequence("Ctrl+L"))
        self._action_rotate_left.triggered.connect(self._viewer.rotate_left)
        view_menu.addAction(self._action_rotate_left)

        self._action_rotate_right = QAction("Rotate &Right", self)
        self._action_rotate_right.setShortcut(QKeySequence("Ctrl+R"))
        self._action_rotate_right.triggered.connect(self._viewer.rotate_right)
        view_menu.addAction(self._action_rotate_right)

        view_menu.addSeparator()

        self._action_show_thumbnails = QAction("Show &Thumbnails", self)
        self._action_show_thumbnails.setShortcut(QKeySequence("Ctrl+T"))
        self._action_show_thumbnails.setCheckable(True)
        self._action_show_thumbnails.toggled.connect(self._on_toggle_thumbnails)
        view_menu.addAction(self._action_show_thumbnails)

        # Help menu
        help_menu: QMenu = menubar.addMenu("&Help")
        action_about = QAction("&About", self)
        action_about.triggered.connect(self._on_about)
        help_menu.addAction(action_about)

    def _create_toolbars(self) -> None:
        """Create the application toolbars."""
        self._main_toolbar = MainToolBar(self)
        self.addToolBar(self._main_toolbar)

        self._annotation_toolbar = AnnotationToolBar(self)
        self.addToolBar(self._annotation_toolbar)

    def _create_statusbar(self) -> None:
        """Create the status bar."""
        self._statusbar = QStatusBar()
        self.setStatusBar(self._statusbar)

        # Page indicator
        self._page_label = QLabel("No document")
        self._statusbar.addWidget(self._page_label)

        # Overlay count
        self._overlay_label = QLabel("")
        self._statusbar.addPermanentWidget(self._overlay_label)

        # Zoom indicator
        self._zoom_label = QLabel("")
        self._statusbar.addPermanentWidget(self._zoom_label)
        self._update_zoom_label(self._viewer.view_state.zoom)

    def _connect_signals(self) -> None:
        """Connect signals and slots."""
        # Document manager signals
        self._document_manager.document_loaded.connect(self._on_document_loaded)
        self._document_manager.document_closed.connect(self._on_document_closed)
        self._document_manager.load_failed.connect(self._on_load_failed)

        # Bake service signals
        self._bake_service.bake_started.connect(self._on_bake_started)
        self._bake_service.bake_completed.connect(self._on_bake_completed)
        self._bake_service.bake_failed.connect(self._on_bake_failed)

        # Viewer signals
        self._viewer.page_changed.connect(self._on_page_changed)
        self._viewer.zoom_changed.connect(self._on_zoom_changed)
        self._viewer.rotation_changed.connect(self._main_toolbar.set_rotation)
        self._viewer.overlays_changed.connect(self._on_overlays_changed)
        self._viewer.mode_changed.connect(self._annotation_toolbar.set_mode)

        # Main toolbar signals
        self._main_toolbar.open_clicked.connect(self._on_open)
        self._main_toolbar.export_clicked.connect(self._on_export)
        self._main_toolbar.page_changed.connect(self._viewer.go_to_page)
        self._main_toolbar.get_prev_action().triggered.connect(self._viewer.go_to_previous_page)
        self._main_toolbar.get_next_action().triggered.connect(self._viewer.go_to_next_page)
        self._main_toolbar.get_zoom_in_action().triggered.connect(self._viewer.zoom_in)
        self._main_toolbar.get_zoom_out_action().triggered.connect(self._viewer.zoom_out)
        self._main_toolbar.get_rotate_left_action().triggered.connect(self._viewer.rotate_left)
        self._main_toolbar.get_rotate_right_action().triggered.connect(self._viewer.rotate_right)

        # Thumbnail panel signals
        self._thumbnail_panel.page_selected.connect(self._viewer.go_to_page)

        # Annotation toolbar signals
        self._annotation_toolbar.mode_selected.connect(self._on_mode_selected)

    def _restore_state(self) -> None:
        """Restore window state from settings."""
        geometry = self._settings.value("MainWindow/geometry")
        if geometry:
            self.restoreGeometry(geometry)

        state = self._settings.value("MainWindow/state")
        if state:
            self.restoreState(state)

    def _save_state(self) -> None:
        """Save window state to settings."""
        self._settings.setValue("MainWindow/geometry", self.saveGeometry())
        self._settings.setValue("MainWindow/state", self.saveState())

    # Public methods
    def open_document(self, file_path: Path | str) -> bool:
        """
        Open a PDF document, replacing the current one.

        Args:
            file_path: Path to the PDF file.

        Returns:
            True if document was opened successfully.
        """
        validation = validate_file_path(file_path, allowed_extensions=[".pdf"])
        if validation.is_failure():
            error = validation.get_error()
            error.log(logger)
            QMessageBox.warning(
                self,
                "Cannot Open File",
                f"{error.message}:\n{file_path}",
            )
            return False
        file_path = validation.unwrap()

        # the viewer only resets once the new document has opened
        result = self._document_manager.load_file(file_path)
        if result.is_failure():
            return False

        self._app_settings.add_recent_directory(str(file_path.parent))
        return True

    @property
    def viewer(self) -> ViewerWidget:
        return self._viewer

    # Document manager handlers
    def _on_document_loaded(self, document: PDFDocument) -> None:
        self._thumbnail_panel.set_document(document)
        self._viewer.set_document(document)
        self._main_toolbar.set_page_count(document.page_count)
        self._main_toolbar.set_current_page(0)
        self.setWindowTitle(f"{document.name} - PageMark")
        self._update_actions_state()
        self.document_opened.emit(document.name)

    def _on_document_closed(self) -> None:
        self._viewer.clear_document()
        self._thumbnail_panel.clear()
        self._main_toolbar.set_page_count(0)
        self._page_label.setText("No document")
        self.setWindowTitle("PageMark")
        self._update_actions_state()
        self.document_closed.emit()

    def _on_load_failed(self, error: AppError) -> None:
        QMessageBox.critical(
            self,
            "Error",
            f"Failed to open document:\n{error.message}",
        )
        self._update_actions_state()

    # Action handlers
    def _on_open(self) -> None:
        """Handle open action."""
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Open PDF",
            self._app_settings.last_directory,
            "PDF Files (*.pdf);;All Files (*)",
        )

        if file_path:
            self.open_document(file_path)

    def _on_export(self) -> None:
        """Bake the overlays into a copy of the document and save it."""
        self._viewer.settle_input()

        document_result = self._document_manager.require_document()
        if document_result.is_failure():
            error = document_result.get_error()
            error.log(logger)
            QMessageBox.warning(self, "Export", error.message)
            return

        if self._bake_service.is_busy:
            QMessageBox.information(self, "Export", "An export is already running.")
            return

        default_path = Path(self._app_settings.last_directory or ".") / self._bake_service.options.output_name
        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Export Annotated PDF",
            str(default_path),
            "PDF Files (*.pdf)",
        )
        if not output_path:
            return

        self._bake_service.bake_async(
            document_result.unwrap().data,
            self._viewer.store,
            self._viewer.view_state.rotation,
            Path(output_path),
        )

    def _on_close_document(self) -> None:
        """Handle close document action."""
        self._document_manager.close()

    def _on_about(self) -> None:
        """Show about dialog."""
        QMessageBox.about(
            self,
            "About PageMark",
            "PageMark\n\n"
            "Highlight text and add text boxes on PDF pages, "
            "then export a copy with the marks drawn in.",
        )

    def _on_mode_selected(self, mode: EditorMode) -> None:
        self._viewer.set_mode(mode)

    def _on_toggle_thumbnails(self, checked: bool) -> None:
        """Handle View > Show Thumbnails action."""
        self._thumbnail_panel.setVisible(checked)

    # Bake service handlers
    def _on_bake_started(self) -> None:
        self._statusbar.showMessage("Exporting...")
        self._update_actions_state()

    def _on_bake_completed(self, result: BakeResult) -> None:
        self._statusbar.showMessage(
            f"Exported {result.highlights_drawn} highlights and "
            f"{result.text_boxes_drawn} text boxes",
            5000,
        )
        self._update_actions_state()

    def _on_bake_failed(self, error: AppError) -> None:
        self._statusbar.clearMessage()
        QMessageBox.critical(
            self,
            "Export Failed",
            f"The annotated PDF could not be exported:\n{error.message}",
        )
        self._update_actions_state()

    # Viewer handlers
    def _on_page_changed(self, page: int, total: int) -> None:
        """Handle page change from viewer."""
        self._page_label.setText(f"Page {page + 1} of {total}")
        self._main_toolbar.set_current_page(page)
        self._thumbnail_panel.set_current_page(page)

    def _on_zoom_changed(self, zoom: float) -> None:
        """Handle zoom change from viewer."""
        self._update_zoom_label(zoom)

    def _on_overlays_changed(self, count: int) -> None:
        self._overlay_label.setText(f"{count} marks" if count else "")

    def _update_zoom_label(self, zoom: float) -> None:
        """Update the zoom indicators."""
        self._zoom_label.setText(f"{round(zoom * 100)}%")
        self._main_toolbar.set_zoom_level(zoom)

    def _update_actions_state(self) -> None:
        """Update the enabled state of actions based on current state."""
        has_document = self._document_manager.has_document

        self._action_export.setEnabled(has_document and not self._bake_service.is_busy)
        self._action_close.setEnabled(has_document)
        self._action_zoom_in.setEnabled(has_document)
        self._action_zoom_out.setEnabled(has_document)
        self._action_rotate_left.setEnabled(has_document)
        self._action_rotate_right.setEnabled(has_document)
        self._main_toolbar.set_document_actions_enabled(has_document)

    # Event handlers
    def closeEvent(self, event) -> None:
        """Release the document and stop the export worker."""
        self._viewer.clear_document()
        self._document_manager.close()
        self._bake_service.shutdown()

        self._save_state()
        self._app_settings.save()

        event.accept()
