from __future__ import annotations
from typing import Dict, List, Optional
import logging

from core.error_types import (
    EngineException,
    NoPagesMountedError,
    PageNotMountedError,
)
from utils.geometry import PageFrame, Point2D, Rect2D, point_distance

logger = logging.getLogger(__name__)


class PageRegistry:
    """
    Current on-screen box of every mounted page, keyed by page index.

    The viewer overwrites a page's frame whenever layout changes (zoom,
    scroll, resize) and drops it when the page goes away. Frames are plain
    records, so nothing here holds on to widgets.
    """

    def __init__(self):
        self._frames: Dict[int, PageFrame] = {}

    def __len__(self) -> int:
        return len(self._frames)

    def __contains__(self, page_index: int) -> bool:
        return page_index in self._frames

    def register(self, page_index: int, viewport_box: Rect2D) -> PageFrame:
        """Record (or overwrite) the viewport box of a page."""
        if page_index < 0:
            raise ValueError(f"Page index must be non-negative, got {page_index}")
        if viewport_box.width < 0 or viewport_box.height < 0:
            raise ValueError(f"Page box must not have negative size: {viewport_box}")

        frame = PageFrame(page_index=page_index, viewport_box=viewport_box)
        self._frames[page_index] = frame
        return frame

    def unregister(self, page_index: int) -> None:
        """Forget a page's frame. Unknown indexes are ignored."""
        self._frames.pop(page_index, None)

    def clear(self) -> None:
        self._frames.clear()

    def mounted_pages(self) -> List[int]:
        return sorted(self._frames)

    def frames(self) -> List[PageFrame]:
        return [self._frames[index] for index in self.mounted_pages()]

    def find_frame(self, page_index: int) -> Optional[PageFrame]:
        return self._frames.get(page_index)

    def frame_for(self, page_index: int) -> PageFrame:
        """
        Frame of a mounted page.

        Raises:
            EngineException: carrying PageNotMountedError.
        """
        frame = self._frames.get(page_index)
        if frame is None:
            raise EngineException(PageNotMountedError(
                message=f"Page {page_index} is not mounted",
                page_index=page_index,
            ))
        return frame

    def page_at(self, point: Point2D) -> Optional[int]:
        """Page whose box contains the point; the lowest index wins on overlap."""
        for frame in self.frames():
            if frame.viewport_box.contains(point):
                return frame.page_index
        return None

    def resolve_owning_page(self, point: Point2D) -> int:
        """
        Page containing the point, or else the page whose center is closest.

        Raises:
            EngineException: carrying NoPagesMountedError when nothing is mounted.
        """
        if not self._frames:
            raise EngineException(NoPagesMountedError(
                message="No pages are mounted",
            ))

        containing = self.page_at(point)
        if containing is not None:
            return containing

        nearest = min(
            self.frames(),
            key=lambda frame: (point_distance(point, frame.viewport_box.center), frame.page_index),
        )
        logger.debug(f"Point {point.to_tuple()} outside all pages, nearest is {nearest.page_index}")
        return nearest.page_index

    def visible_page(self, viewport: Rect2D, threshold: float = 0.5) -> Optional[int]:
        """
        The mounted page showing the largest share of itself inside the
        viewport, provided that share reaches ``threshold``.
        """
        best_index: Optional[int] = None
        best_fraction = 0.0

        for frame in self.frames():
            box = frame.viewport_box
            if box.area <= 0:
                continue
            fraction = box.intersection_area(viewport) / box.area
            if fraction > best_fraction:
                best_index, best_fraction = frame.page_index, fraction

        if best_index is None or best_fraction < threshold:
            return None
        return best_index
