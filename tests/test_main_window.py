from __future__ import annotations

import os

import fitz
from PyQt6 import QtWidgets

from models.overlay import TextBoxOverlay
from models.settings import AppSettings
from ui import main_window as main_window_module
from ui.main_window import MainWindow
from utils.geometry import Point2D


os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_QAPP = None


def _ensure_qapp():
    global _QAPP
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    _QAPP = app
    return _QAPP


def _write_pdf(path, page_count: int = 1):
    document = fitz.open()
    for _ in range(page_count):
        document.new_page(width=612, height=792)
    document.save(str(path))
    document.close()
    return path


def test_failed_open_keeps_document_and_marks(tmp_path, monkeypatch) -> None:
    _ensure_qapp()
    errors = []
    monkeypatch.setattr(
        main_window_module.QMessageBox,
        "critical",
        lambda *args, **kwargs: errors.append(args[2]),
    )
    window = MainWindow(app_settings=AppSettings())
    try:
        assert window.open_document(_write_pdf(tmp_path / "current.pdf", 2))
        document = window.viewer.document
        window.viewer.store.add(TextBoxOverlay(page_index=1, position=Point2D(40, 60), content="Keep"))

        broken = tmp_path / "broken.pdf"
        broken.write_bytes(b"not a pdf at all")
        assert not window.open_document(broken)

        assert len(errors) == 1
        assert window.viewer.document is document
        assert document.is_open()
        assert [overlay.content for overlay in window.viewer.store.text_boxes()] == ["Keep"]
    finally:
        window.viewer.clear_document()
        window._document_manager.close()
        window._bake_service.shutdown()


def test_successful_open_replaces_marks(tmp_path) -> None:
    _ensure_qapp()
    window = MainWindow(app_settings=AppSettings())
    try:
        assert window.open_document(_write_pdf(tmp_path / "first.pdf"))
        window.viewer.store.add(TextBoxOverlay(page_index=0, position=Point2D(40, 60), content="Old"))

        assert window.open_document(_write_pdf(tmp_path / "second.pdf", 3))

        assert window.viewer.page_count == 3
        assert len(window.viewer.store) == 0
    finally:
        window.viewer.clear_document()
        window._document_manager.close()
        window._bake_service.shutdown()


def test_thumbnails_follow_the_document(tmp_path) -> None:
    _ensure_qapp()
    window = MainWindow(app_settings=AppSettings())
    try:
        assert window.open_document(_write_pdf(tmp_path / "deck.pdf", 4))
        panel = window._thumbnail_panel
        assert panel.count == 4

        panel.page_selected.emit(3)
        assert window.viewer.current_page == 3
        assert panel.current_page == 3

        window._document_manager.close()
        assert panel.count == 0
    finally:
        window.viewer.clear_document()
        window._document_manager.close()
        window._bake_service.shutdown()
