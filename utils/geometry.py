"""
Coordinate conversions between the three frames the annotator works in:

* viewport space: pixels of the scrolled viewer, origin top-left, y down;
* page-local space: relative to a page's rendering box, divided by the zoom
  active at capture time (one unit is one PDF point);
* document space: the unrotated PDF page, origin bottom-left, y up.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
import math

from PyQt6.QtCore import QRectF

from core.error_types import EngineException, NoOwningPageError

VALID_ROTATIONS: Tuple[int, ...] = (0, 90, 180, 270)


@dataclass(frozen=True)
class Point2D:
    """Simple 2D point for geometry calculations."""
    x: float
    y: float

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Rect2D:
    """Axis-aligned rectangle with a top-left (x, y) corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point2D:
        return Point2D(self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point2D) -> bool:
        """Edges are inclusive so adjacent boxes both claim a shared border."""
        return self.x <= point.x <= self.right and self.y <= point.y <= self.bottom

    def intersection_area(self, other: Rect2D) -> float:
        overlap_w = min(self.right, other.right) - max(self.x, other.x)
        overlap_h = min(self.bottom, other.bottom) - max(self.y, other.y)
        if overlap_w <= 0 or overlap_h <= 0:
            return 0.0
        return overlap_w * overlap_h

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_qrectf(self) -> QRectF:
        return QRectF(self.x, self.y, self.width, self.height)

    @classmethod
    def from_points(cls, first: Point2D, second: Point2D) -> Rect2D:
        """Normalized rectangle spanned by two corners in any order."""
        left = min(first.x, second.x)
        top = min(first.y, second.y)
        return cls(left, top, abs(second.x - first.x), abs(second.y - first.y))


@dataclass(frozen=True)
class PageRect:
    """Zoom-normalized, page-local rectangle (top-left origin, y down)."""
    top: float
    left: float
    width: float
    height: float


@dataclass(frozen=True)
class PageSize:
    """Native page size in document units (points)."""
    width: float
    height: float


@dataclass(frozen=True)
class PageFrame:
    """Where a mounted page currently sits in the viewport."""
    page_index: int
    viewport_box: Rect2D

    @property
    def origin(self) -> Point2D:
        return Point2D(self.viewport_box.x, self.viewport_box.y)


def normalize_rotation(rotation: int) -> int:
    """Fold any multiple of 90 into 0/90/180/270."""
    normalized = int(rotation) % 360
    if normalized not in VALID_ROTATIONS or rotation != int(rotation):
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {rotation}")
    return normalized


def _require_zoom(zoom: float) -> float:
    if not zoom > 0 or math.isinf(zoom):
        raise ValueError(f"Zoom must be a positive finite number, got {zoom}")
    return float(zoom)


def _require_frame(page_frame: Optional[PageFrame], anchor: Point2D) -> PageFrame:
    if page_frame is None:
        raise EngineException(NoOwningPageError(
            message="No page frame owns this position",
            point=anchor.to_tuple(),
        ))
    return page_frame


def to_page_local(
    viewport_rect: Rect2D,
    page_frame: Optional[PageFrame],
    zoom: float,
) -> PageRect:
    """Convert a viewport rectangle into zoom-normalized page-local units."""
    zoom = _require_zoom(zoom)
    frame = _require_frame(page_frame, viewport_rect.center)
    return PageRect(
        top=(viewport_rect.y - frame.viewport_box.y) / zoom,
        left=(viewport_rect.x - frame.viewport_box.x) / zoom,
        width=viewport_rect.width / zoom,
        height=viewport_rect.height / zoom,
    )


def to_viewport(
    page_rect: PageRect,
    page_frame: Optional[PageFrame],
    zoom: float,
) -> Rect2D:
    """Project a page-local rectangle back into viewport pixels."""
    zoom = _require_zoom(zoom)
    frame = _require_frame(page_frame, Point2D(page_rect.left, page_rect.top))
    return Rect2D(
        x=page_rect.left * zoom + frame.viewport_box.x,
        y=page_rect.top * zoom + frame.viewport_box.y,
        width=page_rect.width * zoom,
        height=page_rect.height * zoom,
    )


def point_to_page_local(
    point: Point2D,
    page_frame: Optional[PageFrame],
    zoom: float,
) -> Point2D:
    zoom = _require_zoom(zoom)
    frame = _require_frame(page_frame, point)
    return Point2D(
        (point.x - frame.viewport_box.x) / zoom,
        (point.y - frame.viewport_box.y) / zoom,
    )


def point_to_viewport(
    point: Point2D,
    page_frame: Optional[PageFrame],
    zoom: float,
) -> Point2D:
    zoom = _require_zoom(zoom)
    frame = _require_frame(page_frame, point)
    return Point2D(
        point.x * zoom + frame.viewport_box.x,
        point.y * zoom + frame.viewport_box.y,
    )


def rotate_point(point: Point2D, page_size: PageSize, rotation: int) -> Point2D:
    """
    Map a page-local point (top-left origin, y down) into document space
    (bottom-left origin, y up) for the given page rotation.
    """
    rotation = normalize_rotation(rotation)
    width, height = page_size.width, page_size.height

    if rotation == 90:
        return Point2D(height - point.y, point.x)
    elif rotation == 180:
        return Point2D(width - point.x, height - point.y)
    elif rotation == 270:
        return Point2D(point.y, width - point.x)
    return Point2D(point.x, height - point.y)


def unrotate_point(point: Point2D, page_size: PageSize, rotation: int) -> Point2D:
    """Inverse of rotate_point."""
    rotation = normalize_rotation(rotation)
    width, height = page_size.width, page_size.height

    if rotation == 90:
        return Point2D(point.y, height - point.x)
    elif rotation == 180:
        return Point2D(width - point.x, height - point.y)
    elif rotation == 270:
        return Point2D(width - point.y, point.x)
    return Point2D(point.x, height - point.y)


def place_rect(page_rect: PageRect, page_size: PageSize, rotation: int) -> Rect2D:
    """
    Rotation-aware placement of a page-local rectangle in document space.

    The result's (x, y) is the bottom-left corner in PDF user space. At 90 and
    270 degrees the drawn width and height are swapped.
    """
    rotation = normalize_rotation(rotation)
    width, height = page_size.width, page_size.height
    top, left = page_rect.top, page_rect.left
    rect_w, rect_h = page_rect.width, page_rect.height

    if rotation == 90:
        return Rect2D(height - top - rect_h, left, rect_h, rect_w)
    elif rotation == 180:
        return Rect2D(width - left - rect_w, height - top - rect_h, rect_w, rect_h)
    elif rotation == 270:
        return Rect2D(top, width - left - rect_w, rect_h, rect_w)
    return Rect2D(left, height - top - rect_h, rect_w, rect_h)


def unplace_rect(placed: Rect2D, page_size: PageSize, rotation: int) -> PageRect:
    """Inverse of place_rect."""
    rotation = normalize_rotation(rotation)
    width, height = page_size.width, page_size.height

    if rotation == 90:
        rect_w, rect_h = placed.height, placed.width
        return PageRect(top=height - placed.x - rect_h, left=placed.y, width=rect_w, height=rect_h)
    elif rotation == 180:
        rect_w, rect_h = placed.width, placed.height
        return PageRect(
            top=height - placed.y - rect_h,
            left=width - placed.x - rect_w,
            width=rect_w,
            height=rect_h,
        )
    elif rotation == 270:
        rect_w, rect_h = placed.height, placed.width
        return PageRect(top=placed.x, left=width - placed.y - rect_w, width=rect_w, height=rect_h)
    return PageRect(
        top=height - placed.y - placed.height,
        left=placed.x,
        width=placed.width,
        height=placed.height,
    )


def union_rect(rects: Iterable[Rect2D]) -> Optional[Rect2D]:
    """Bounding rectangle of all given rectangles, None when there are none."""
    rects = list(rects)
    if not rects:
        return None

    min_x = min(r.x for r in rects)
    min_y = min(r.y for r in rects)
    max_x = max(r.right for r in rects)
    max_y = max(r.bottom for r in rects)

    return Rect2D(min_x, min_y, max_x - min_x, max_y - min_y)


def point_distance(point1: Point2D, point2: Point2D) -> float:
    """Calculate the Euclidean distance between two points."""
    dx = point2.x - point1.x
    dy = point2.y - point1.y
    return math.sqrt(dx * dx + dy * dy)
