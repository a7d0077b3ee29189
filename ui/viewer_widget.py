"""
Viewer Widget

Continuous-scroll PDF view that feeds the page registry and shows overlays.
"""

from __future__ import annotations
from typing import Dict, List, Optional
import logging

import fitz
from PyQt6.QtWidgets import (
    QWidget,
    QScrollArea,
    QLineEdit,
)
from PyQt6.QtCore import Qt, QPoint, QPointF, QRectF, pyqtSignal
from PyQt6.QtGui import (
    QImage,
    QPixmap,
    QPainter,
    QColor,
    QFont,
    QWheelEvent,
    QMouseEvent,
    QKeyEvent,
    QMoveEvent,
    QPaintEvent,
    QResizeEvent,
)

from core.overlay_renderer import OverlayRenderer
from core.overlay_store import OverlayStore
from core.page_registry import PageRegistry
from core.pdf_engine import PDFDocument, PDFEngine, TextWord
from core.selection_capture import SelectionCapture
from core.text_selection import WordSelectionProvider
from models.overlay import ColorTag, OverlayType
from models.settings import AnnotationSettings, ViewerSettings
from models.view_state import EditorMode, ViewState
from ui.highlight_popup import HighlightPopup
from utils.geometry import (
    PageSize,
    Point2D,
    Rect2D,
    point_distance,
    point_to_viewport,
    to_viewport,
)

logger = logging.getLogger(__name__)


def fitz_pixmap_to_qimage(pixmap: fitz.Pixmap) -> QImage:
    """Convert a PyMuPDF pixmap to a QImage that owns its pixels."""
    if pixmap.alpha:
        image_format = QImage.Format.Format_RGBA8888
    else:
        image_format = QImage.Format.Format_RGB888

    image = QImage(
        pixmap.samples,
        pixmap.width,
        pixmap.height,
        pixmap.stride,
        image_format,
    )
    return image.copy()


class TextBoxEditor(QLineEdit):
    """
    One-line input shown where a text box is being typed.

    Signals:
        cancelled: Emitted when Escape is pressed
    """

    cancelled = pyqtSignal()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        if event.key() == Qt.Key.Key_Escape:
            self.cancelled.emit()
            return
        super().keyPressEvent(event)


class PageCanvas(QWidget):
    """The scrolled surface; painting and pointer input are handled by the viewer."""

    moved = pyqtSignal()

    def __init__(self, viewer: ViewerWidget):
        super().__init__()
        self._viewer = viewer
        self.setMouseTracking(False)

    def paintEvent(self, event: QPaintEvent) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        self._viewer._paint_canvas(painter, QRectF(event.rect()))
        painter.end()

    def moveEvent(self, event: QMoveEvent) -> None:
        super().moveEvent(event)
        self.moved.emit()

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._viewer._on_canvas_pressed(event.position())

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        if event.buttons() & Qt.MouseButton.LeftButton:
            self._viewer._on_canvas_dragged(event.position())

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._viewer._on_canvas_released(event.position())


class ViewerWidget(QScrollArea):
    """
    PDF viewer widget with highlight and text box support.

    Every page is laid out top to bottom on one canvas. Whenever layout or
    scroll position changes, each page's on-screen box is written to the
    page registry, which is the only place the overlay engine learns where
    pages are.

    Signals:
        page_changed: Emitted when the page in view changes (current_page, total_pages)
        zoom_changed: Emitted when zoom level changes (zoom_level)
        rotation_changed: Emitted when the export rotation changes (degrees)
        mode_changed: Emitted when the editor mode changes (EditorMode)
        overlays_changed: Emitted after any overlay was added or removed (count)
    """

    page_changed = pyqtSignal(int, int)
    zoom_changed = pyqtSignal(float)
    rotation_changed = pyqtSignal(int)
    mode_changed = pyqtSignal(object)
    overlays_changed = pyqtSignal(int)

    CLICK_TOLERANCE = 3.0
    BACKGROUND_COLOR = QColor(64, 64, 64)
    SELECTION_COLOR = QColor(51, 153, 255, 70)

    def __init__(
        self,
        viewer_settings: Optional[ViewerSettings] = None,
        annotation_settings: Optional[AnnotationSettings] = None,
        pdf_engine: Optional[PDFEngine] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)

        self._viewer_settings = viewer_settings or ViewerSettings()
        self._annotation_settings = annotation_settings or AnnotationSettings()
        self._pdf_engine = pdf_engine or PDFEngine()

        self._document: Optional[PDFDocument] = None
        self._page_sizes: List[PageSize] = []
        self._page_boxes: List[QRectF] = []
        self._pixmaps: Dict[int, QPixmap] = {}

        self._view_state = ViewState(zoom=self._viewer_settings.default_zoom_level)
        self._current_page = 0

        # Overlay engine
        self._registry = PageRegistry()
        self._store = OverlayStore()
        self._provider = WordSelectionProvider(self._registry, self._words_for_page)
        self._capture = SelectionCapture(self._registry, self._store, self._provider)
        self._renderer = OverlayRenderer(
            self._registry,
            self._store,
            font_size=self._annotation_settings.text_font_size,
        )
        self._store.subscribe(self._on_store_changed)

        # Drag state
        self._drag_start: Optional[Point2D] = None

        self._setup_ui()

    def _setup_ui(self) -> None:
        """Set up the viewer UI."""
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setWidgetResizable(False)
        self.setAlignment(Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop)

        # Set background color
        self.setAutoFillBackground(True)
        palette = self.palette()
        palette.setColor(self.backgroundRole(), self.BACKGROUND_COLOR)
        self.setPalette(palette)

        self._canvas = PageCanvas(self)
        self._canvas.moved.connect(self._on_canvas_moved)
        self.setWidget(self._canvas)

        # floating controls are viewport children, positioned in viewport pixels
        self._popup = HighlightPopup(self.viewport())
        self._popup.color_selected.connect(self.apply_highlight)

        self._editor = TextBoxEditor(self.viewport())
        self._editor.setPlaceholderText("Type text...")
        self._editor.setMinimumWidth(160)
        self._editor.textChanged.connect(self._capture.update_draft)
        self._editor.editingFinished.connect(self._finish_text_input)
        self._editor.cancelled.connect(self._cancel_text_input)
        self._editor.hide()

        self._update_cursor()

    @property
    def document(self) -> Optional[PDFDocument]:
        return self._document

    @property
    def store(self) -> OverlayStore:
        return self._store

    @property
    def registry(self) -> PageRegistry:
        return self._registry

    @property
    def capture(self) -> SelectionCapture:
        return self._capture

    @property
    def view_state(self) -> ViewState:
        return self._view_state

    @property
    def mode(self) -> EditorMode:
        return self._capture.mode

    @property
    def current_page(self) -> int:
        """Get the current page number (0-based)."""
        return self._current_page

    @property
    def page_count(self) -> int:
        """Get the total number of pages."""
        return len(self._page_sizes)

    # Document lifecycle
    def set_document(self, document: PDFDocument) -> None:
        """Show a newly loaded document. Overlays of the previous one are dropped."""
        self.clear_document()

        sizes = []
        for page_number in range(document.page_count):
            info_result = document.get_page_info(page_number)
            if info_result.is_failure():
                info_result.get_error().log(logger)
                sizes.append(PageSize(0.0, 0.0))
                continue
            sizes.append(info_result.unwrap().size)

        self._document = document
        self._page_sizes = sizes
        self._store.set_page_count(document.page_count)
        self._current_page = 0

        self._relayout()
        self.verticalScrollBar().setValue(0)
        self.page_changed.emit(self._current_page, self.page_count)

    def clear_document(self) -> None:
        """Drop the document, its overlays and every page frame."""
        self._capture.cancel_draft()
        self._capture.discard_selection()
        self._provider.clear()
        self._store.clear()
        self._store.set_page_count(None)
        self._registry.clear()

        self._document = None
        self._page_sizes = []
        self._page_boxes = []
        self._pixmaps.clear()
        self._drag_start = None

        self._popup.hide()
        self._editor.hide()
        self._canvas.setFixedSize(0, 0)
        self._canvas.update()

    def _words_for_page(self, page_index: int) -> List[TextWord]:
        if self._document is None:
            return []
        return self._document.get_page_words(page_index).unwrap_or([])

    # Layout
    def _relayout(self) -> None:
        """Lay pages out for the current zoom and publish their frames."""
        zoom = self._view_state.zoom
        spacing = self._viewer_settings.page_spacing
        label_height = self._viewer_settings.page_label_height

        widest = max((size.width for size in self._page_sizes), default=0.0) * zoom
        canvas_width = widest + 2 * spacing

        boxes = []
        y = float(spacing)
        for size in self._page_sizes:
            width, height = size.width * zoom, size.height * zoom
            y += label_height
            boxes.append(QRectF((canvas_width - width) / 2, y, width, height))
            y += height + spacing

        self._page_boxes = boxes
        self._pixmaps.clear()
        self._canvas.setFixedSize(int(canvas_width), int(y))
        self._register_frames()
        self._canvas.update()

    def _register_frames(self) -> None:
        offset = self._canvas.pos()
        for page_index, box in enumerate(self._page_boxes):
            self._registry.register(page_index, Rect2D(
                box.x() + offset.x(),
                box.y() + offset.y(),
                box.width(),
                box.height(),
            ))
        self._sync_floating_widgets()
        self._update_current_page()

    def _on_canvas_moved(self) -> None:
        if self._page_boxes:
            self._register_frames()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        if self._page_boxes:
            self._register_frames()

    def _update_current_page(self) -> None:
        viewport = self.viewport()
        visible = self._registry.visible_page(
            Rect2D(0, 0, viewport.width(), viewport.height()),
            threshold=self._viewer_settings.visible_page_threshold,
        )
        if visible is not None and visible != self._current_page:
            self._current_page = visible
            self.page_changed.emit(self._current_page, self.page_count)

    def _sync_floating_widgets(self) -> None:
        """Keep the color popup and text input attached to their page positions."""
        zoom = self._view_state.zoom

        pending = self._capture.pending_selection
        frame = self._registry.find_frame(pending.page_index) if pending else None
        if frame is None:
            self._popup.hide()
        else:
            box = to_viewport(pending.rect, frame, zoom)
            self._popup.show_at(QPoint(int(box.x), int(box.y - SelectionCapture.POPUP_OFFSET)))

        draft = self._capture.draft
        frame = self._registry.find_frame(draft.page_index) if draft else None
        if frame is None:
            self._editor.hide()
        else:
            anchor = point_to_viewport(draft.position, frame, zoom)
            font = self._editor.font()
            font.setPixelSize(max(1, round(self._annotation_settings.text_font_size * zoom)))
            self._editor.setFont(font)
            self._editor.adjustSize()
            self._editor.move(int(anchor.x), int(anchor.y))
            self._editor.show()

    def _viewport_point(self, position: QPointF) -> Point2D:
        offset = self._canvas.pos()
        return Point2D(position.x() + offset.x(), position.y() + offset.y())

    def _to_canvas(self, rect: Rect2D) -> QRectF:
        offset = self._canvas.pos()
        return rect.to_qrectf().translated(-offset.x(), -offset.y())

    # Navigation methods
    def go_to_page(self, page: int) -> None:
        """Scroll a page to the top of the view."""
        if not self._page_boxes:
            return

        page = max(0, min(page, self.page_count - 1))
        label_height = self._viewer_settings.page_label_height
        self.verticalScrollBar().setValue(int(self._page_boxes[page].y() - label_height))
        if page != self._current_page:
            self._current_page = page
            self.page_changed.emit(self._current_page, self.page_count)

    def go_to_previous_page(self) -> None:
        """Go to the previous page."""
        self.go_to_page(self._current_page - 1)

    def go_to_next_page(self) -> None:
        """Go to the next page."""
        self.go_to_page(self._current_page + 1)

    # Zoom methods
    def zoom_in(self) -> None:
        """Zoom in."""
        self._apply_view_state(self._view_state.zoomed_in())

    def zoom_out(self) -> None:
        """Zoom out."""
        self._apply_view_state(self._view_state.zoomed_out())

    def set_zoom(self, zoom: float) -> None:
        """Set the zoom level."""
        self._apply_view_state(self._view_state.with_zoom(zoom))

    def _apply_view_state(self, view_state: ViewState) -> None:
        if view_state == self._view_state:
            return

        zoom_changed = view_state.zoom != self._view_state.zoom
        rotation_changed = view_state.rotation != self._view_state.rotation
        self._view_state = view_state

        if zoom_changed:
            page = self._current_page
            self._relayout()
            self.go_to_page(page)
            self.zoom_changed.emit(view_state.zoom)
        if rotation_changed:
            self.rotation_changed.emit(view_state.rotation)

    # Rotation methods
    def rotate_left(self) -> None:
        """Rotate the exported document left (counter-clockwise)."""
        self._apply_view_state(self._view_state.rotated_left())

    def rotate_right(self) -> None:
        """Rotate the exported document right (clockwise)."""
        self._apply_view_state(self._view_state.rotated_right())

    # Mode methods
    def set_mode(self, mode: EditorMode) -> None:
        """Switch editor mode, settling any open input first."""
        previous = self._capture.mode
        self._capture.set_mode(mode)
        self._editor.hide()
        self._popup.hide()
        self._update_cursor()
        self._canvas.update()
        if mode != previous:
            self.mode_changed.emit(mode)

    def settle_input(self) -> None:
        """Commit an open text input, e.g. before exporting."""
        self._capture.commit_draft()
        self._editor.hide()

    def _update_cursor(self) -> None:
        """Update cursor based on mode."""
        mode = self._capture.mode
        if mode == EditorMode.SELECT:
            self._canvas.setCursor(Qt.CursorShape.IBeamCursor)
        elif mode == EditorMode.ADD_TEXT:
            self._canvas.setCursor(Qt.CursorShape.CrossCursor)
        else:
            self._canvas.setCursor(Qt.CursorShape.PointingHandCursor)

    # Highlight and text box actions
    def apply_highlight(self, color_tag: ColorTag) -> None:
        """Turn the pending selection into a highlight."""
        self._capture.apply_highlight(color_tag)
        self._popup.hide()
        self._canvas.update()

    def _finish_text_input(self) -> None:
        if self._capture.draft is None:
            return
        self._capture.commit_draft()
        self._editor.hide()

    def _cancel_text_input(self) -> None:
        self._capture.cancel_draft()
        self._editor.hide()

    def _on_store_changed(self) -> None:
        self._canvas.update()
        self.overlays_changed.emit(len(self._store))

    # Pointer input
    def _on_canvas_pressed(self, position: QPointF) -> None:
        if self._document is None:
            return

        point = self._viewport_point(position)
        mode = self._capture.mode

        if mode == EditorMode.SELECT:
            self._capture.discard_selection()
            self._popup.hide()
            self._drag_start = point
            self._canvas.update()

        elif mode == EditorMode.ADD_TEXT:
            draft = self._capture.on_click(point, self._view_state)
            self._editor.blockSignals(True)
            self._editor.clear()
            self._editor.blockSignals(False)
            if draft is None:
                self._editor.hide()
                return
            self._sync_floating_widgets()
            self._editor.setFocus()

        elif mode == EditorMode.ERASE:
            self._renderer.erase_at(point, self._view_state, mode)

    def _on_canvas_dragged(self, position: QPointF) -> None:
        if self._drag_start is None or self._capture.mode != EditorMode.SELECT:
            return
        self._provider.select_region(self._drag_start, self._viewport_point(position), self._view_state.zoom)
        self._canvas.update()

    def _on_canvas_released(self, position: QPointF) -> None:
        start = self._drag_start
        self._drag_start = None
        if start is None or self._capture.mode != EditorMode.SELECT:
            return

        end = self._viewport_point(position)
        if point_distance(start, end) < self.CLICK_TOLERANCE:
            self._provider.clear()
            self._canvas.update()
            return

        self._provider.select_region(start, end, self._view_state.zoom)
        self._capture.on_pointer_released(self._view_state)
        self._sync_floating_widgets()
        self._canvas.update()

    def keyPressEvent(self, event: QKeyEvent) -> None:
        """Enter applies the default highlight color to a pending selection."""
        if (
            event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter)
            and self._capture.pending_selection is not None
        ):
            self.apply_highlight(self._annotation_settings.default_highlight_color)
            return
        super().keyPressEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Ctrl+wheel zooms; plain wheel scrolls."""
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            if event.angleDelta().y() > 0:
                self.zoom_in()
            elif event.angleDelta().y() < 0:
                self.zoom_out()
            event.accept()
            return
        super().wheelEvent(event)

    # Painting
    def _page_pixmap(self, page_index: int) -> Optional[QPixmap]:
        """Rendered page for the current zoom, rendered on first use."""
        if page_index in self._pixmaps:
            return self._pixmaps[page_index]

        result = self._pdf_engine.render_page_to_pixmap(
            self._document,
            page_index,
            scale=self._view_state.zoom,
        )
        if result.is_failure():
            result.get_error().log(logger)
            return None

        self._pixmaps[page_index] = QPixmap.fromImage(fitz_pixmap_to_qimage(result.unwrap()))
        return self._pixmaps[page_index]

    def _paint_canvas(self, painter: QPainter, dirty: QRectF) -> None:
        painter.fillRect(dirty, self.BACKGROUND_COLOR)
        if self._document is None:
            return

        label_height = self._viewer_settings.page_label_height
        painter.setPen(QColor(220, 220, 220))
        for page_index, box in enumerate(self._page_boxes):
            if not box.adjusted(0, -label_height, 0, 0).intersects(dirty):
                continue

            painter.drawText(
                QRectF(box.x(), box.y() - label_height, box.width(), label_height),
                Qt.AlignmentFlag.AlignCenter,
                f"Page {page_index + 1}",
            )

            pixmap = self._page_pixmap(page_index)
            if pixmap is None:
                painter.fillRect(box, Qt.GlobalColor.white)
            else:
                painter.drawPixmap(box, pixmap, QRectF(pixmap.rect()))

        self._paint_overlays(painter)
        self._paint_selection(painter)

    def _paint_overlays(self, painter: QPainter) -> None:
        opacity = round(self._annotation_settings.highlight_opacity * 255)
        font = QFont("Helvetica")

        for projected_list in self._renderer.project_all(self._view_state).values():
            for projected in projected_list:
                rect = self._to_canvas(projected.viewport_rect)

                if projected.overlay_type == OverlayType.HIGHLIGHT:
                    color = QColor(projected.color_tag.color.to_hex())
                    color.setAlpha(opacity)
                    painter.fillRect(rect, color)
                    continue

                font.setPixelSize(max(1, round(projected.font_size)))
                painter.setFont(font)
                painter.setPen(Qt.GlobalColor.black)
                painter.drawText(
                    rect,
                    Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop,
                    projected.text,
                )

    def _paint_selection(self, painter: QPainter) -> None:
        selection = self._provider.current_selection()
        if selection is None:
            return
        painter.fillRect(self._to_canvas(selection.bounding_rect), self.SELECTION_COLOR)

