from __future__ import annotations

from core.page_registry import PageRegistry
from core.pdf_engine import TextWord
from core.text_selection import WordSelectionProvider
from utils.geometry import Point2D, Rect2D

_WORDS = [
    TextWord(rect=Rect2D(50, 100, 30, 10), text="Hello", block=0, line=0, word=0),
    TextWord(rect=Rect2D(85, 100, 30, 10), text="world", block=0, line=0, word=1),
    TextWord(rect=Rect2D(50, 300, 30, 10), text="Other", block=1, line=0, word=0),
]


def _provider() -> WordSelectionProvider:
    registry = PageRegistry()
    registry.register(0, Rect2D(100, 0, 1224, 1584))
    return WordSelectionProvider(registry, lambda page_index: _WORDS if page_index == 0 else [])


def test_drag_selects_touched_words() -> None:
    provider = _provider()

    selection = provider.select_region(Point2D(100 + 80, 190), Point2D(100 + 240, 230), zoom=2.0)

    assert selection is not None
    assert selection.text == "Hello world"
    assert selection.bounding_rect == Rect2D(200, 200, 130, 20)
    assert provider.current_selection() == selection


def test_drag_over_empty_area_selects_nothing() -> None:
    provider = _provider()
    assert provider.select_region(Point2D(1000, 1000), Point2D(1100, 1100), zoom=2.0) is None
    assert provider.current_selection() is None


def test_drag_starting_beside_page_uses_nearest_page() -> None:
    provider = _provider()
    selection = provider.select_region(Point2D(50, 190), Point2D(100 + 120, 230), zoom=2.0)
    assert selection is not None
    assert selection.text == "Hello"


def test_clear_drops_selection() -> None:
    provider = _provider()
    provider.select_region(Point2D(180, 190), Point2D(340, 230), zoom=2.0)
    provider.clear()
    assert provider.current_selection() is None


def test_no_pages_means_no_selection() -> None:
    provider = WordSelectionProvider(PageRegistry(), lambda page_index: _WORDS)
    assert provider.select_region(Point2D(0, 0), Point2D(10, 10), zoom=1.0) is None
