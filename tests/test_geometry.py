from __future__ import annotations

import pytest

from core.error_types import EngineException
from utils.geometry import (
    PageFrame,
    PageRect,
    PageSize,
    Point2D,
    Rect2D,
    normalize_rotation,
    place_rect,
    point_to_page_local,
    point_to_viewport,
    rotate_point,
    to_page_local,
    to_viewport,
    union_rect,
    unplace_rect,
    unrotate_point,
)


def _frame(x: float = 0.0, y: float = 0.0, width: float = 600.0, height: float = 800.0) -> PageFrame:
    return PageFrame(page_index=0, viewport_box=Rect2D(x, y, width, height))


def test_selection_rect_becomes_page_local_at_unit_zoom() -> None:
    page_rect = to_page_local(Rect2D(50, 100, 120, 20), _frame(), 1.0)
    assert page_rect == PageRect(top=100, left=50, width=120, height=20)


def test_page_local_divides_out_zoom_and_origin() -> None:
    page_rect = to_page_local(Rect2D(130, 240, 240, 40), _frame(30, 40), 2.0)
    assert page_rect == PageRect(top=100, left=50, width=120, height=20)


@pytest.mark.parametrize("zoom", [0.5, 1.0, 1.3, 2.0, 3.7])
def test_viewport_round_trip(zoom: float) -> None:
    frame = _frame(17, -240, 612 * zoom, 792 * zoom)
    original = Rect2D(85.5, 12.25, 64, 18)

    restored = to_viewport(to_page_local(original, frame, zoom), frame, zoom)

    assert restored.x == pytest.approx(original.x)
    assert restored.y == pytest.approx(original.y)
    assert restored.width == pytest.approx(original.width)
    assert restored.height == pytest.approx(original.height)


def test_point_round_trip() -> None:
    frame = _frame(12, 34)
    point = Point2D(200, 300)
    restored = point_to_viewport(point_to_page_local(point, frame, 1.5), frame, 1.5)
    assert restored.x == pytest.approx(point.x)
    assert restored.y == pytest.approx(point.y)


def test_missing_frame_raises_no_owning_page() -> None:
    with pytest.raises(EngineException) as info:
        to_page_local(Rect2D(0, 0, 10, 10), None, 1.0)
    assert info.value.error.error_code() == "NO_OWNING_PAGE"


@pytest.mark.parametrize("zoom", [0, -1.0, float("inf")])
def test_zoom_must_be_positive_and_finite(zoom: float) -> None:
    with pytest.raises(ValueError):
        to_page_local(Rect2D(0, 0, 10, 10), _frame(), zoom)


def test_rotation_ninety_places_scenario_rect() -> None:
    placed = place_rect(PageRect(top=100, left=50, width=120, height=20), PageSize(612, 792), 90)
    assert placed == Rect2D(672, 50, 20, 120)


def test_rotation_zero_flips_y_only() -> None:
    placed = place_rect(PageRect(top=100, left=50, width=120, height=20), PageSize(612, 792), 0)
    assert placed == Rect2D(50, 672, 120, 20)


def test_rotation_one_eighty_and_two_seventy() -> None:
    page_rect = PageRect(top=100, left=50, width=120, height=20)
    size = PageSize(612, 792)
    assert place_rect(page_rect, size, 180) == Rect2D(442, 672, 120, 20)
    assert place_rect(page_rect, size, 270) == Rect2D(100, 442, 20, 120)


@pytest.mark.parametrize("rotation", [0, 90, 180, 270])
def test_placement_inverse(rotation: int) -> None:
    size = PageSize(612, 792)
    page_rect = PageRect(top=31, left=77, width=140, height=12)
    assert unplace_rect(place_rect(page_rect, size, rotation), size, rotation) == page_rect


@pytest.mark.parametrize("rotation", [0, 90, 180, 270])
def test_point_rotation_inverse(rotation: int) -> None:
    size = PageSize(612, 792)
    point = Point2D(50, 100)
    assert unrotate_point(rotate_point(point, size, rotation), size, rotation) == point


def test_point_rotation_formulas() -> None:
    size = PageSize(612, 792)
    point = Point2D(50, 100)
    assert rotate_point(point, size, 0) == Point2D(50, 692)
    assert rotate_point(point, size, 90) == Point2D(692, 50)
    assert rotate_point(point, size, 180) == Point2D(562, 692)
    assert rotate_point(point, size, 270) == Point2D(100, 562)


def test_normalize_rotation() -> None:
    assert normalize_rotation(-90) == 270
    assert normalize_rotation(450) == 90
    with pytest.raises(ValueError):
        normalize_rotation(45)


def test_union_rect() -> None:
    assert union_rect([]) is None
    merged = union_rect([Rect2D(10, 10, 5, 5), Rect2D(30, 0, 10, 40)])
    assert merged == Rect2D(10, 0, 30, 40)


def test_rect_from_points_normalizes_corners() -> None:
    assert Rect2D.from_points(Point2D(50, 80), Point2D(10, 20)) == Rect2D(10, 20, 40, 60)
