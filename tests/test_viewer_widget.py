from __future__ import annotations

import os

import fitz
import pytest
from PyQt6 import QtWidgets
from PyQt6.QtCore import QPointF

from core.pdf_engine import PDFEngine
from models.overlay import ColorTag, OverlayType
from models.view_state import EditorMode
from ui.viewer_widget import ViewerWidget


os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_QAPP = None


def _ensure_qapp():
    global _QAPP
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    _QAPP = app
    return _QAPP


def _load_document(page_count: int = 2):
    source = fitz.open()
    for index in range(page_count):
        page = source.new_page(width=612, height=792)
        page.insert_text((72, 100), f"Quarterly results page {index + 1}", fontsize=12)
    data = source.tobytes()
    source.close()
    return PDFEngine().load_document(data, name="report.pdf").unwrap()


def _canvas_position(viewer: ViewerWidget, page_index: int, left: float, top: float) -> QPointF:
    """Canvas coordinates of a page-local point at the viewer's current zoom."""
    frame = viewer.registry.frame_for(page_index)
    zoom = viewer.view_state.zoom
    offset = viewer.widget().pos()
    return QPointF(
        frame.viewport_box.x + left * zoom - offset.x(),
        frame.viewport_box.y + top * zoom - offset.y(),
    )


def test_set_document_registers_every_page() -> None:
    _ensure_qapp()
    document = _load_document(3)
    viewer = ViewerWidget()
    pages = []
    viewer.page_changed.connect(lambda current, total: pages.append((current, total)))
    try:
        viewer.set_document(document)

        assert viewer.registry.mounted_pages() == [0, 1, 2]
        first = viewer.registry.frame_for(0).viewport_box
        second = viewer.registry.frame_for(1).viewport_box
        assert first.width == pytest.approx(612 * 1.3)
        assert first.height == pytest.approx(792 * 1.3)
        assert second.y > first.bottom
        assert pages[-1] == (0, 3)
    finally:
        viewer.clear_document()
        document.close()


def test_zoom_relayouts_and_rotation_leaves_frames_alone() -> None:
    _ensure_qapp()
    document = _load_document()
    viewer = ViewerWidget()
    rotations = []
    viewer.rotation_changed.connect(rotations.append)
    try:
        viewer.set_document(document)
        viewer.zoom_in()
        box = viewer.registry.frame_for(0).viewport_box
        assert box.width == pytest.approx(612 * 1.4)

        viewer.rotate_left()
        assert rotations == [270]
        assert viewer.registry.frame_for(0).viewport_box.width == pytest.approx(612 * 1.4)
    finally:
        viewer.clear_document()
        document.close()


def test_text_box_is_stored_in_page_points() -> None:
    _ensure_qapp()
    document = _load_document()
    viewer = ViewerWidget()
    counts = []
    viewer.overlays_changed.connect(counts.append)
    try:
        viewer.set_document(document)
        viewer.set_mode(EditorMode.ADD_TEXT)

        viewer._on_canvas_pressed(_canvas_position(viewer, 1, 50, 120))
        assert viewer.capture.draft is not None
        viewer._editor.setText("  Check this figure  ")
        viewer.settle_input()

        (overlay,) = viewer.store.all()
        assert overlay.overlay_type == OverlayType.TEXT_BOX
        assert overlay.page_index == 1
        assert overlay.content == "Check this figure"
        assert overlay.position.x == pytest.approx(50, abs=0.01)
        assert overlay.position.y == pytest.approx(120, abs=0.01)
        assert counts[-1] == 1
    finally:
        viewer.clear_document()
        document.close()


def test_drag_selection_then_color_creates_highlight() -> None:
    _ensure_qapp()
    document = _load_document()
    viewer = ViewerWidget()
    try:
        viewer.set_document(document)
        viewer._on_canvas_pressed(_canvas_position(viewer, 0, 60, 80))
        viewer._on_canvas_dragged(_canvas_position(viewer, 0, 400, 110))
        viewer._on_canvas_released(_canvas_position(viewer, 0, 400, 110))

        assert viewer.capture.pending_selection is not None
        viewer.apply_highlight(ColorTag.GREEN)

        (overlay,) = viewer.store.highlights()
        assert overlay.page_index == 0
        assert overlay.color_tag == ColorTag.GREEN
        assert overlay.rect.top < 100 < overlay.rect.top + overlay.rect.height
        assert viewer.capture.pending_selection is None
    finally:
        viewer.clear_document()
        document.close()


def test_erase_mode_removes_overlay_under_click() -> None:
    _ensure_qapp()
    document = _load_document(1)
    viewer = ViewerWidget()
    try:
        viewer.set_document(document)
        viewer.set_mode(EditorMode.ADD_TEXT)
        viewer._on_canvas_pressed(_canvas_position(viewer, 0, 200, 300))
        viewer._editor.setText("Remove me")
        viewer.set_mode(EditorMode.ERASE)
        assert len(viewer.store) == 1

        viewer._on_canvas_pressed(_canvas_position(viewer, 0, 205, 305))
        assert len(viewer.store) == 0
    finally:
        viewer.clear_document()
        document.close()


def test_clear_document_drops_overlays_and_frames() -> None:
    _ensure_qapp()
    document = _load_document(1)
    viewer = ViewerWidget()
    try:
        viewer.set_document(document)
        viewer.set_mode(EditorMode.ADD_TEXT)
        viewer._on_canvas_pressed(_canvas_position(viewer, 0, 10, 10))
        viewer._editor.setText("Draft")
        viewer.settle_input()
        assert len(viewer.store) == 1

        viewer.clear_document()

        assert len(viewer.store) == 0
        assert len(viewer.registry) == 0
        assert viewer.page_count == 0
    finally:
        document.close()
