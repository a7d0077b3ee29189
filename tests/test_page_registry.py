from __future__ import annotations

import pytest

from core.error_types import EngineException
from core.page_registry import PageRegistry
from utils.geometry import Point2D, Rect2D


def _two_pages() -> PageRegistry:
    registry = PageRegistry()
    registry.register(0, Rect2D(0, 0, 600, 800))
    registry.register(1, Rect2D(0, 820, 600, 800))
    return registry


def test_page_at_uses_containment() -> None:
    registry = _two_pages()
    assert registry.page_at(Point2D(300, 400)) == 0
    assert registry.page_at(Point2D(300, 1000)) == 1
    assert registry.page_at(Point2D(300, 810)) is None
    assert registry.page_at(Point2D(700, 400)) is None


def test_page_at_edges_are_inclusive() -> None:
    registry = _two_pages()
    assert registry.page_at(Point2D(600, 800)) == 0
    assert registry.page_at(Point2D(0, 820)) == 1


def test_register_overwrites_frame() -> None:
    registry = _two_pages()
    registry.register(0, Rect2D(10, -300, 1200, 1600))
    assert registry.frame_for(0).viewport_box == Rect2D(10, -300, 1200, 1600)
    assert len(registry) == 2


def test_register_rejects_bad_input() -> None:
    registry = PageRegistry()
    with pytest.raises(ValueError):
        registry.register(-1, Rect2D(0, 0, 10, 10))
    with pytest.raises(ValueError):
        registry.register(0, Rect2D(0, 0, -10, 10))


def test_frame_for_unmounted_page_raises() -> None:
    registry = _two_pages()
    registry.unregister(1)
    assert 1 not in registry
    with pytest.raises(EngineException) as info:
        registry.frame_for(1)
    assert info.value.error.error_code() == "PAGE_NOT_MOUNTED"


def test_resolve_owning_page_falls_back_to_nearest_center() -> None:
    registry = _two_pages()
    assert registry.resolve_owning_page(Point2D(300, 812)) == 1
    assert registry.resolve_owning_page(Point2D(-50, 100)) == 0


def test_resolve_owning_page_without_pages_raises() -> None:
    with pytest.raises(EngineException) as info:
        PageRegistry().resolve_owning_page(Point2D(0, 0))
    assert info.value.error.error_code() == "NO_PAGES_MOUNTED"


def test_visible_page_needs_threshold() -> None:
    registry = _two_pages()
    assert registry.visible_page(Rect2D(0, 0, 600, 700)) == 0
    assert registry.visible_page(Rect2D(0, 700, 600, 700)) == 1
    assert registry.visible_page(Rect2D(0, 500, 600, 500), threshold=0.5) is None


def test_clear_drops_everything() -> None:
    registry = _two_pages()
    registry.clear()
    assert registry.mounted_pages() == []
    assert registry.find_frame(0) is None
