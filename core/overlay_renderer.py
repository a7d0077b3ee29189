from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional
import logging

from core.overlay_store import OverlayStore
from core.page_registry import PageRegistry
from models.overlay import (
    ColorTag,
    HighlightOverlay,
    Overlay,
    OverlayType,
)
from models.view_state import EditorMode, ViewState
from utils.geometry import PageFrame, PageRect, Point2D, Rect2D, to_viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectedOverlay:
    """An overlay positioned in current viewport pixels."""

    overlay_id: str
    overlay_type: OverlayType
    page_index: int
    viewport_rect: Rect2D
    color_tag: Optional[ColorTag] = None
    text: str = ""
    font_size: float = 0.0


class OverlayRenderer:
    """
    Projects stored overlays onto the pages currently mounted.

    Projection depends only on the stored record, the page frame and the
    zoom. Rotation is deliberately not applied: page pixels are not shown
    rotated while editing, so overlays stay upright with them.
    """

    TEXT_FONT_SIZE = 12.0
    AVERAGE_CHAR_WIDTH = 0.55
    LINE_HEIGHT = 1.3

    def __init__(
        self,
        registry: PageRegistry,
        store: OverlayStore,
        font_size: float = TEXT_FONT_SIZE,
    ):
        self._registry = registry
        self._store = store
        self._font_size = font_size

    def text_box_extent(self, content: str) -> tuple[float, float]:
        """Approximate width and height of a text box, in page-local units."""
        width = max(len(content), 1) * self._font_size * self.AVERAGE_CHAR_WIDTH
        return width, self._font_size * self.LINE_HEIGHT

    def _project(self, overlay: Overlay, frame: PageFrame, zoom: float) -> ProjectedOverlay:
        if isinstance(overlay, HighlightOverlay):
            return ProjectedOverlay(
                overlay_id=overlay.id,
                overlay_type=OverlayType.HIGHLIGHT,
                page_index=overlay.page_index,
                viewport_rect=to_viewport(overlay.rect, frame, zoom),
                color_tag=overlay.color_tag,
                text=overlay.source_text,
            )

        width, height = self.text_box_extent(overlay.content)
        box = PageRect(
            top=overlay.position.y,
            left=overlay.position.x,
            width=width,
            height=height,
        )
        return ProjectedOverlay(
            overlay_id=overlay.id,
            overlay_type=OverlayType.TEXT_BOX,
            page_index=overlay.page_index,
            viewport_rect=to_viewport(box, frame, zoom),
            text=overlay.content,
            font_size=self._font_size * zoom,
        )

    def project_page(self, page_index: int, view_state: ViewState) -> List[ProjectedOverlay]:
        """Viewport placement of one page's overlays, back to front."""
        frame = self._registry.find_frame(page_index)
        if frame is None:
            return []
        return [
            self._project(overlay, frame, view_state.zoom)
            for overlay in self._store.all_for_page(page_index)
        ]

    def project_all(self, view_state: ViewState) -> Dict[int, List[ProjectedOverlay]]:
        """Projections for every mounted page."""
        return {
            page_index: self.project_page(page_index, view_state)
            for page_index in self._registry.mounted_pages()
        }

    def hit_test(self, point: Point2D, view_state: ViewState) -> Optional[str]:
        """Id of the topmost overlay under ``point``, if any."""
        page_index = self._registry.page_at(point)
        if page_index is None:
            return None

        for projected in reversed(self.project_page(page_index, view_state)):
            if projected.viewport_rect.contains(point):
                return projected.overlay_id
        return None

    def erase_at(
        self,
        point: Point2D,
        view_state: ViewState,
        mode: EditorMode,
    ) -> Optional[str]:
        """In ERASE mode, remove the topmost overlay under ``point``."""
        if mode != EditorMode.ERASE:
            return None

        overlay_id = self.hit_test(point, view_state)
        if overlay_id is None:
            return None

        self._store.remove(overlay_id)
        logger.info(f"Erased overlay {overlay_id}")
        return overlay_id
