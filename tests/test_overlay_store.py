from __future__ import annotations

import pytest

from core.error_types import EngineException
from core.overlay_store import OverlayStore
from models.overlay import ColorTag, HighlightOverlay, TextBoxOverlay
from utils.geometry import PageRect, Point2D


def _highlight(page_index: int = 0, **kwargs) -> HighlightOverlay:
    return HighlightOverlay(
        page_index=page_index,
        rect=PageRect(top=100, left=50, width=120, height=20),
        **kwargs,
    )


def test_add_keeps_insertion_order() -> None:
    store = OverlayStore()
    first = store.add(_highlight())
    second = store.add(TextBoxOverlay(page_index=0, position=Point2D(10, 10), content="note"))
    third = store.add(_highlight(page_index=1, color_tag=ColorTag.PINK))

    assert [overlay.id for overlay in store.all()] == [first.id, second.id, third.id]
    assert store.all_for_page(0) == [first, second]
    assert store.highlights() == [first, third]
    assert store.text_boxes() == [second]
    assert len(store) == 3


def test_ids_are_unique() -> None:
    assert _highlight().id != _highlight().id


def test_duplicate_id_is_rejected() -> None:
    store = OverlayStore()
    overlay = store.add(_highlight())
    with pytest.raises(EngineException) as info:
        store.add(_highlight(id=overlay.id))
    assert info.value.error.error_code() == "OVERLAY_ERR"
    assert len(store) == 1


def test_page_index_checked_against_page_count() -> None:
    store = OverlayStore(page_count=2)
    store.add(_highlight(page_index=1))
    with pytest.raises(EngineException):
        store.add(_highlight(page_index=2))


def test_remove_is_idempotent() -> None:
    store = OverlayStore()
    overlay = store.add(_highlight())

    assert store.remove(overlay.id) is True
    assert store.remove(overlay.id) is False
    assert store.remove("unknown") is False
    assert overlay.id not in store


def test_snapshot_is_detached_from_later_changes() -> None:
    store = OverlayStore()
    store.add(_highlight())
    snapshot = store.snapshot()

    store.add(_highlight())
    store.clear()

    assert isinstance(snapshot, tuple)
    assert len(snapshot) == 1
    assert len(store) == 0


def test_listeners_are_notified_until_unsubscribed() -> None:
    store = OverlayStore()
    calls = []
    unsubscribe = store.subscribe(lambda: calls.append(len(store)))

    overlay = store.add(_highlight())
    store.remove(overlay.id)
    store.remove(overlay.id)
    unsubscribe()
    store.add(_highlight())

    assert calls == [1, 0]


def test_text_box_requires_content() -> None:
    with pytest.raises(ValueError):
        TextBoxOverlay(page_index=0, position=Point2D(0, 0), content="")
