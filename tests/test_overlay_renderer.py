from __future__ import annotations

import pytest

from core.overlay_renderer import OverlayRenderer
from core.overlay_store import OverlayStore
from core.page_registry import PageRegistry
from models.overlay import HighlightOverlay, OverlayType, TextBoxOverlay
from models.view_state import EditorMode, ViewState
from utils.geometry import PageRect, Point2D, Rect2D


def _setup():
    registry = PageRegistry()
    registry.register(0, Rect2D(10, 20, 600, 800))
    store = OverlayStore()
    return registry, store, OverlayRenderer(registry, store)


def test_projection_follows_zoom_and_moved_origin() -> None:
    registry, store, renderer = _setup()
    store.add(HighlightOverlay(page_index=0, rect=PageRect(top=100, left=50, width=120, height=20)))

    at_one = renderer.project_page(0, ViewState(zoom=1.0))[0].viewport_rect
    assert at_one == Rect2D(60, 120, 120, 20)

    registry.register(0, Rect2D(30, -400, 1200, 1600))
    at_two = renderer.project_page(0, ViewState(zoom=2.0))[0].viewport_rect

    assert at_two == Rect2D(30 + 100, -400 + 200, 240, 40)
    assert at_two.width == 2 * at_one.width
    assert at_two.height == 2 * at_one.height


def test_projection_ignores_rotation() -> None:
    registry, store, renderer = _setup()
    store.add(HighlightOverlay(page_index=0, rect=PageRect(top=100, left=50, width=120, height=20)))

    upright = renderer.project_page(0, ViewState(zoom=1.0, rotation=0))
    rotated = renderer.project_page(0, ViewState(zoom=1.0, rotation=90))

    assert upright == rotated


def test_text_box_projection() -> None:
    registry, store, renderer = _setup()
    store.add(TextBoxOverlay(page_index=0, position=Point2D(50, 100), content="abc"))

    projected = renderer.project_page(0, ViewState(zoom=2.0))[0]

    assert projected.overlay_type == OverlayType.TEXT_BOX
    assert projected.text == "abc"
    assert projected.font_size == pytest.approx(24.0)
    assert projected.viewport_rect.x == pytest.approx(10 + 100)
    assert projected.viewport_rect.y == pytest.approx(20 + 200)
    assert projected.viewport_rect.width == pytest.approx(3 * 12 * OverlayRenderer.AVERAGE_CHAR_WIDTH * 2)


def test_unmounted_pages_project_nothing() -> None:
    registry, store, renderer = _setup()
    store.add(HighlightOverlay(page_index=3, rect=PageRect(top=0, left=0, width=10, height=10)))

    assert renderer.project_page(3, ViewState()) == []
    assert list(renderer.project_all(ViewState())) == [0]


def test_hit_test_returns_topmost() -> None:
    registry, store, renderer = _setup()
    below = store.add(HighlightOverlay(page_index=0, rect=PageRect(top=100, left=50, width=120, height=20)))
    above = store.add(HighlightOverlay(page_index=0, rect=PageRect(top=105, left=60, width=40, height=40)))

    assert renderer.hit_test(Point2D(80, 130), ViewState(zoom=1.0)) == above.id
    assert renderer.hit_test(Point2D(150, 125), ViewState(zoom=1.0)) == below.id
    assert renderer.hit_test(Point2D(500, 700), ViewState(zoom=1.0)) is None


def test_erase_only_in_erase_mode() -> None:
    registry, store, renderer = _setup()
    overlay = store.add(HighlightOverlay(page_index=0, rect=PageRect(top=100, left=50, width=120, height=20)))
    point = Point2D(100, 130)

    assert renderer.erase_at(point, ViewState(zoom=1.0), EditorMode.SELECT) is None
    assert overlay.id in store

    assert renderer.erase_at(point, ViewState(zoom=1.0), EditorMode.ERASE) == overlay.id
    assert renderer.erase_at(point, ViewState(zoom=1.0), EditorMode.ERASE) is None
    assert len(store) == 0
