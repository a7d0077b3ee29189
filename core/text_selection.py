from __future__ import annotations
from typing import Callable, List, Optional, Sequence
import logging

from core.error_types import EngineException
from core.page_registry import PageRegistry
from core.pdf_engine import TextWord
from core.selection_capture import SelectionProvider, SelectionSnapshot
from utils.geometry import (
    PageRect,
    Point2D,
    Rect2D,
    to_page_local,
    to_viewport,
    union_rect,
)

logger = logging.getLogger(__name__)

WordSource = Callable[[int], Sequence[TextWord]]


class WordSelectionProvider(SelectionProvider):
    """
    Text selection over the words of a page.

    A drag is resolved to the page under its starting point (nearest page
    when it starts in a gap); every word whose box touches the dragged
    region is selected, and the selection's box is the union of those words
    projected back into the viewport.
    """

    def __init__(self, registry: PageRegistry, word_source: WordSource):
        self._registry = registry
        self._word_source = word_source
        self._selection: Optional[SelectionSnapshot] = None

    def current_selection(self) -> Optional[SelectionSnapshot]:
        return self._selection

    def clear(self) -> None:
        self._selection = None

    def select_region(self, start: Point2D, end: Point2D, zoom: float) -> Optional[SelectionSnapshot]:
        """Select the words under the viewport rectangle spanned by ``start`` and ``end``."""
        self._selection = None

        try:
            page_index = self._registry.resolve_owning_page(start)
        except EngineException as exception:
            exception.error.log(logger)
            return None

        frame = self._registry.find_frame(page_index)
        region = to_page_local(Rect2D.from_points(start, end), frame, zoom)
        words = self._words_in(page_index, region)
        if not words:
            return None

        bounds = union_rect(word.rect for word in words)
        page_bounds = PageRect(top=bounds.y, left=bounds.x, width=bounds.width, height=bounds.height)

        self._selection = SelectionSnapshot(
            bounding_rect=to_viewport(page_bounds, frame, zoom),
            text=" ".join(word.text for word in words),
        )
        return self._selection

    def _words_in(self, page_index: int, region: PageRect) -> List[TextWord]:
        region_box = Rect2D(region.left, region.top, region.width, region.height)
        # inclusive edges, so a flat horizontal drag still catches its line
        return [
            word for word in self._word_source(page_index)
            if word.rect.x <= region_box.right
            and region_box.x <= word.rect.right
            and word.rect.y <= region_box.bottom
            and region_box.y <= word.rect.bottom
        ]
