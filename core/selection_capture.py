"""
Turns pointer input into overlay records.

In SELECT mode a pointer release reads the current text selection, finds
the page under the selection's center and keeps it as a pending selection
until the user picks a highlight color or clicks elsewhere. In ADD_TEXT
mode a click opens a one-line draft that becomes a text box on commit when
it holds any text. Nothing is written to the store until an action
finalizes it, and nothing outside a mounted page is ever recorded.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import logging

from core.error_types import EngineException, NoOwningPageError
from core.overlay_store import OverlayStore
from core.page_registry import PageRegistry
from models.overlay import ColorTag, HighlightOverlay, TextBoxOverlay
from models.view_state import EditorMode, ViewState
from utils.geometry import (
    PageRect,
    Point2D,
    Rect2D,
    point_to_page_local,
    to_page_local,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionSnapshot:
    """What the text layer reports for the active selection."""

    bounding_rect: Rect2D
    text: str


class SelectionProvider(ABC):
    """Source of the live text selection, in viewport coordinates."""

    @abstractmethod
    def current_selection(self) -> Optional[SelectionSnapshot]:
        """The active selection, or None when nothing is selected."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop the active selection."""
        pass


@dataclass(frozen=True)
class PendingSelection:
    """A captured selection waiting for the user to pick an action."""

    page_index: int
    rect: PageRect
    text: str
    anchor: Point2D


@dataclass
class TextBoxDraft:
    """The single open text input."""

    page_index: int
    position: Point2D
    anchor: Point2D
    text: str = ""


class SelectionCapture:
    """Mode-aware capture of highlights and text boxes."""

    POPUP_OFFSET = 35.0

    def __init__(
        self,
        registry: PageRegistry,
        store: OverlayStore,
        provider: SelectionProvider,
        mode: EditorMode = EditorMode.SELECT,
    ):
        self._registry = registry
        self._store = store
        self._provider = provider
        self._mode = mode
        self._pending: Optional[PendingSelection] = None
        self._draft: Optional[TextBoxDraft] = None

    @property
    def mode(self) -> EditorMode:
        return self._mode

    @property
    def pending_selection(self) -> Optional[PendingSelection]:
        return self._pending

    @property
    def draft(self) -> Optional[TextBoxDraft]:
        return self._draft

    def set_mode(self, mode: EditorMode) -> Optional[TextBoxOverlay]:
        """
        Switch modes. Any pending input is settled first: the selection is
        dropped and an open draft is committed (or discarded when empty).

        Returns:
            The text box created from the open draft, if any.
        """
        committed = self.commit_draft()
        self.discard_selection()
        if mode != self._mode:
            logger.debug(f"Editor mode {self._mode.name} -> {mode.name}")
        self._mode = mode
        return committed

    def _owning_page(self, point: Point2D) -> int:
        page_index = self._registry.page_at(point)
        if page_index is None:
            raise EngineException(NoOwningPageError(
                message="Position lies outside every mounted page",
                point=point.to_tuple(),
            ))
        return page_index

    def on_pointer_released(self, view_state: ViewState) -> Optional[PendingSelection]:
        """
        Capture the provider's selection as a pending selection.

        Returns:
            The new pending selection, or None when the selection was empty,
            outside every page, or the viewer is not in SELECT mode.
        """
        if self._mode != EditorMode.SELECT:
            return None

        snapshot = self._provider.current_selection()
        if snapshot is None or not snapshot.text.strip():
            self._pending = None
            return None

        rect = snapshot.bounding_rect
        try:
            page_index = self._owning_page(rect.center)
            page_rect = to_page_local(rect, self._registry.find_frame(page_index), view_state.zoom)
        except EngineException as exception:
            exception.error.log(logger)
            self._pending = None
            return None

        self._pending = PendingSelection(
            page_index=page_index,
            rect=page_rect,
            text=snapshot.text,
            anchor=Point2D(rect.x, rect.y - self.POPUP_OFFSET),
        )
        return self._pending

    def apply_highlight(self, color_tag: ColorTag) -> Optional[HighlightOverlay]:
        """Finalize the pending selection as a highlight of the given color."""
        pending = self._pending
        if pending is None:
            return None

        overlay = HighlightOverlay(
            page_index=pending.page_index,
            rect=pending.rect,
            color_tag=color_tag,
            source_text=pending.text,
        )
        self._store.add(overlay)
        self._pending = None
        self._provider.clear()
        logger.info(f"Highlighted {len(pending.text)} characters on page {pending.page_index}")
        return overlay

    def discard_selection(self) -> None:
        """Forget the pending selection (click elsewhere, mode switch)."""
        if self._pending is not None:
            self._pending = None
            self._provider.clear()

    def on_click(self, point: Point2D, view_state: ViewState) -> Optional[TextBoxDraft]:
        """
        Open a text input at ``point`` in ADD_TEXT mode. An input that is
        already open gets committed before the new one appears.
        """
        if self._mode != EditorMode.ADD_TEXT:
            return None

        self.commit_draft()

        try:
            page_index = self._owning_page(point)
            position = point_to_page_local(point, self._registry.find_frame(page_index), view_state.zoom)
        except EngineException as exception:
            exception.error.log(logger)
            return None

        self._draft = TextBoxDraft(page_index=page_index, position=position, anchor=point)
        return self._draft

    def update_draft(self, text: str) -> None:
        if self._draft is not None:
            self._draft.text = text

    def commit_draft(self) -> Optional[TextBoxOverlay]:
        """
        Close the open input. Non-blank content becomes a text box; blank
        content is dropped without creating anything.
        """
        draft = self._draft
        self._draft = None
        if draft is None:
            return None

        content = draft.text.strip()
        if not content:
            logger.debug(f"Discarded empty text input on page {draft.page_index}")
            return None

        overlay = TextBoxOverlay(
            page_index=draft.page_index,
            position=draft.position,
            content=content,
        )
        self._store.add(overlay)
        logger.info(f"Added text box on page {draft.page_index}")
        return overlay

    def cancel_draft(self) -> None:
        """Close the open input without creating anything (Escape)."""
        self._draft = None
