from __future__ import annotations
from pathlib import Path
import threading

import fitz

from core.bake_engine import DocumentBakeEngine
from core.overlay_store import OverlayStore
from models.overlay import HighlightOverlay
from services.bake_service import BakeService
from utils.geometry import PageRect


def _make_pdf() -> bytes:
    document = fitz.open()
    document.new_page(width=612, height=792)
    data = document.tobytes()
    document.close()
    return data


class _BlockingEngine(DocumentBakeEngine):
    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def bake(self, document_bytes, overlays, rotation):
        self.started.set()
        self.release.wait(timeout=10)
        return super().bake(document_bytes, overlays, rotation)


def test_bake_without_document_writes_nothing(tmp_path: Path) -> None:
    service = BakeService()
    failures = []
    service.bake_failed.connect(failures.append)
    output = tmp_path / "annotated.pdf"

    result = service.bake_now(None, [], 0, output)

    assert result.is_failure()
    assert result.get_error().error_code() == "NO_DOCUMENT"
    assert not output.exists()
    assert list(tmp_path.iterdir()) == []
    assert [error.error_code() for error in failures] == ["NO_DOCUMENT"]
    service.shutdown()


def test_bake_now_writes_output(tmp_path: Path) -> None:
    service = BakeService()
    completed = []
    service.bake_completed.connect(completed.append)
    output = tmp_path / "out" / "annotated.pdf"
    overlay = HighlightOverlay(page_index=0, rect=PageRect(top=10, left=10, width=50, height=10))

    result = service.bake_now(_make_pdf(), [overlay], 180, output)

    assert result.is_success()
    assert output.exists()
    with fitz.open(str(output)) as document:
        assert document[0].rotation == 180
    assert completed == [result.unwrap()]
    assert not service.is_busy
    service.shutdown()


def test_second_request_is_rejected_while_busy(tmp_path: Path) -> None:
    engine = _BlockingEngine()
    service = BakeService(engine)
    store = OverlayStore()
    store.add(HighlightOverlay(page_index=0, rect=PageRect(top=10, left=10, width=50, height=10)))
    output = tmp_path / "annotated.pdf"

    submitted = service.bake_async(_make_pdf(), store, 0, output)
    assert submitted.is_success()
    assert engine.started.wait(timeout=10)

    rejected = service.bake_now(_make_pdf(), [], 0, tmp_path / "other.pdf")
    assert rejected.is_failure()
    assert rejected.get_error().error_code() == "BAKE_BUSY"

    engine.release.set()
    result = submitted.unwrap().result(timeout=10)

    assert result.is_success()
    assert output.exists()
    assert not (tmp_path / "other.pdf").exists()
    assert not service.is_busy
    service.shutdown()


def test_async_bake_uses_snapshot_taken_at_request(tmp_path: Path) -> None:
    engine = _BlockingEngine()
    service = BakeService(engine)
    store = OverlayStore()
    store.add(HighlightOverlay(page_index=0, rect=PageRect(top=10, left=10, width=50, height=10)))

    submitted = service.bake_async(_make_pdf(), store, 0, tmp_path / "annotated.pdf")
    engine.started.wait(timeout=10)
    store.add(HighlightOverlay(page_index=0, rect=PageRect(top=40, left=10, width=50, height=10)))
    engine.release.set()

    result = submitted.unwrap().result(timeout=10)

    assert result.unwrap().highlights_drawn == 1
    service.shutdown()


def test_serialization_failure_leaves_no_output(tmp_path: Path, monkeypatch) -> None:
    data = _make_pdf()
    service = BakeService()
    failures = []
    completions = []
    service.bake_failed.connect(failures.append)
    service.bake_completed.connect(completions.append)

    def _fail_to_serialize(self, *args, **kwargs):
        raise RuntimeError("disk full while serializing")

    monkeypatch.setattr(fitz.Document, "tobytes", _fail_to_serialize)
    overlays = [HighlightOverlay(page_index=0, rect=PageRect(top=10, left=10, width=50, height=10))]
    try:
        result = service.bake_now(data, overlays, 90, tmp_path / "annotated.pdf")
    finally:
        service.shutdown()

    assert result.get_error().error_code() == "BAKE_ERR"
    assert [error.error_code() for error in failures] == ["BAKE_ERR"]
    assert completions == []
    assert list(tmp_path.iterdir()) == []
    assert not service.is_busy
