from __future__ import annotations
from typing import Callable, Dict, Iterator, List, Optional, Tuple
import logging

from core.error_types import EngineException, OverlayError
from models.overlay import HighlightOverlay, Overlay, TextBoxOverlay
from utils.validators import validate_page_number

logger = logging.getLogger(__name__)

StoreListener = Callable[[], None]


class OverlayStore:
    """
    In-memory overlay records keyed by id.

    Insertion order is kept because it is the paint order: later overlays
    are drawn on top and win hit-tests.
    """

    def __init__(self, page_count: Optional[int] = None):
        self._overlays: Dict[str, Overlay] = {}
        self._page_count = page_count
        self._listeners: List[StoreListener] = []

    def __len__(self) -> int:
        return len(self._overlays)

    def __contains__(self, overlay_id: str) -> bool:
        return overlay_id in self._overlays

    def __iter__(self) -> Iterator[Overlay]:
        return iter(list(self._overlays.values()))

    @property
    def page_count(self) -> Optional[int]:
        return self._page_count

    def set_page_count(self, page_count: Optional[int]) -> None:
        """Page count of the loaded document; None disables the page check."""
        self._page_count = page_count

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Call ``listener`` after every change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def add(self, overlay: Overlay) -> Overlay:
        """
        Store a new overlay.

        Raises:
            EngineException: carrying OverlayError when the page index is out
                of range or the id is already taken.
        """
        if overlay.id in self._overlays:
            raise EngineException(OverlayError(
                message=f"Overlay id already in use: {overlay.id}",
                overlay_id=overlay.id,
                page_index=overlay.page_index,
            ))

        if self._page_count is not None:
            check = validate_page_number(overlay.page_index, self._page_count)
            if check.is_failure():
                raise EngineException(OverlayError(
                    message=f"Overlay page index rejected: {check.get_error().message}",
                    overlay_id=overlay.id,
                    page_index=overlay.page_index,
                ))

        self._overlays[overlay.id] = overlay
        logger.debug(f"Added {overlay.overlay_type.name} {overlay.id} on page {overlay.page_index}")
        self._notify()
        return overlay

    def remove(self, overlay_id: str) -> bool:
        """Remove an overlay; unknown ids are a no-op. True when something was removed."""
        overlay = self._overlays.pop(overlay_id, None)
        if overlay is None:
            return False

        logger.debug(f"Removed {overlay.overlay_type.name} {overlay_id}")
        self._notify()
        return True

    def get(self, overlay_id: str) -> Optional[Overlay]:
        return self._overlays.get(overlay_id)

    def all(self) -> List[Overlay]:
        return list(self._overlays.values())

    def all_for_page(self, page_index: int) -> List[Overlay]:
        """Overlays of one page, back to front."""
        return [overlay for overlay in self._overlays.values() if overlay.page_index == page_index]

    def highlights(self) -> List[HighlightOverlay]:
        return [overlay for overlay in self._overlays.values() if isinstance(overlay, HighlightOverlay)]

    def text_boxes(self) -> List[TextBoxOverlay]:
        return [overlay for overlay in self._overlays.values() if isinstance(overlay, TextBoxOverlay)]

    def snapshot(self) -> Tuple[Overlay, ...]:
        """Immutable view of every overlay; records themselves are frozen."""
        return tuple(self._overlays.values())

    def clear(self) -> None:
        if not self._overlays:
            return
        self._overlays.clear()
        self._notify()
