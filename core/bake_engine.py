"""
Bakes overlays into a new PDF.

Every overlay is placed with the rotation-aware formulas of
``utils.geometry`` in PDF user space (bottom-left origin, y up) and then
handed to PyMuPDF, which addresses the unrotated page with a top-left
origin. Overlays are recorded on the page as displayed, so a source page
that already carries a rotation flag is first mapped back to its unrotated
frame through the page's derotation matrix. Pages are then drawn with their
rotation flag cleared and get the document-wide rotation written only once
all drawing is done, so the marks are rotated exactly once by the viewer
that opens the file.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import logging

import fitz

from core.error_types import (
    Result,
    Success,
    Failure,
    BakeError,
    DocumentLoadFailedError,
    NoDocumentLoadedError,
    capture_exception,
)
from models.overlay import HighlightOverlay, Overlay, TextBoxOverlay
from utils.geometry import PageRect, PageSize, Point2D, Rect2D, place_rect, rotate_point
from utils.validators import validate_rotation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BakeOptions:
    """Fixed drawing parameters of the exported marks."""

    highlight_opacity: float = 0.5
    font_size: float = 12.0
    font_name: str = "helv"
    text_color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    output_name: str = "annotated.pdf"


@dataclass(frozen=True)
class BakeResult:
    """The serialized output and a summary of what went into it."""

    data: bytes
    file_name: str
    page_count: int
    rotation: int
    highlights_drawn: int
    text_boxes_drawn: int


def to_fitz_rect(placed: Rect2D, page_size: PageSize) -> fitz.Rect:
    """Document-space rect (bottom-left origin) as a PyMuPDF page rect."""
    top = page_size.height - placed.y - placed.height
    return fitz.Rect(placed.x, top, placed.x + placed.width, top + placed.height)


def to_fitz_point(point: Point2D, page_size: PageSize) -> fitz.Point:
    """Document-space point (bottom-left origin) as a PyMuPDF page point."""
    return fitz.Point(point.x, page_size.height - point.y)


def to_unrotated_rect(rect: PageRect, derotation: fitz.Matrix) -> PageRect:
    """Rect on the displayed page as a rect on the unrotated page (both top-left origin)."""
    box = fitz.Rect(rect.left, rect.top, rect.left + rect.width, rect.top + rect.height) * derotation
    return PageRect(top=box.y0, left=box.x0, width=box.width, height=box.height)


def to_unrotated_point(point: Point2D, derotation: fitz.Matrix) -> Point2D:
    """Point on the displayed page as a point on the unrotated page."""
    mapped = fitz.Point(point.x, point.y) * derotation
    return Point2D(mapped.x, mapped.y)


class DocumentBakeEngine:
    """Draws highlights and text boxes into a copy of the source document."""

    def __init__(self, options: Optional[BakeOptions] = None):
        self._options = options or BakeOptions()
        self._ascender = fitz.Font(self._options.font_name).ascender

    @property
    def options(self) -> BakeOptions:
        return self._options

    def bake(
        self,
        document_bytes: Optional[bytes],
        overlays: Sequence[Overlay],
        rotation: int,
    ) -> Result[BakeResult]:
        """
        Produce the annotated document.

        Args:
            document_bytes: The original document, or None when nothing is loaded.
            overlays: Every overlay to bake, in paint order.
            rotation: Document-wide rotation to write to all pages.

        Returns:
            Result containing the output bytes. On failure no output exists.
        """
        if not document_bytes:
            return Failure(NoDocumentLoadedError(message="Nothing to export: no document is loaded"))

        rotation_result = validate_rotation(rotation)
        if rotation_result.is_failure():
            return Failure(BakeError(message=rotation_result.get_error().message))
        rotation = rotation_result.unwrap()

        try:
            document = fitz.open(stream=document_bytes, filetype="pdf")
        except Exception as exception:
            return Failure(DocumentLoadFailedError(
                message=f"Failed to reopen document for export: {str(exception)}",
            ))

        try:
            page_count = len(document)
            by_page = self._group_by_page(overlays, page_count)
            if by_page.is_failure():
                return by_page

            highlights_drawn = 0
            text_boxes_drawn = 0

            for page_index, page_overlays in by_page.unwrap().items():
                page = document[page_index]
                derotation = page.derotation_matrix
                page.set_rotation(0)
                page_size = PageSize(page.rect.width, page.rect.height)

                for overlay in page_overlays:
                    if isinstance(overlay, HighlightOverlay):
                        self._draw_highlight(page, overlay, page_size, rotation, derotation)
                        highlights_drawn += 1
                    else:
                        self._draw_text_box(page, overlay, page_size, rotation, derotation)
                        text_boxes_drawn += 1

            for page in document:
                page.set_rotation(rotation)

            data = document.tobytes(garbage=3, deflate=True)

        except Exception:
            return Failure(capture_exception(BakeError, "Failed to bake overlays into the document"))
        finally:
            document.close()

        logger.info(
            f"Baked {highlights_drawn} highlights and {text_boxes_drawn} text boxes "
            f"at rotation {rotation} ({len(data)} bytes)"
        )
        return Success(BakeResult(
            data=data,
            file_name=self._options.output_name,
            page_count=page_count,
            rotation=rotation,
            highlights_drawn=highlights_drawn,
            text_boxes_drawn=text_boxes_drawn,
        ))

    def _group_by_page(
        self,
        overlays: Sequence[Overlay],
        page_count: int,
    ) -> Result[Dict[int, List[Overlay]]]:
        by_page: Dict[int, List[Overlay]] = {}
        for overlay in overlays:
            if not 0 <= overlay.page_index < page_count:
                return Failure(BakeError(
                    message=f"Overlay refers to page {overlay.page_index} of a {page_count}-page document",
                    page_index=overlay.page_index,
                    overlay_id=overlay.id,
                ))
            by_page.setdefault(overlay.page_index, []).append(overlay)
        return Success(by_page)

    def _draw_highlight(
        self,
        page: fitz.Page,
        overlay: HighlightOverlay,
        page_size: PageSize,
        rotation: int,
        derotation: fitz.Matrix,
    ) -> None:
        page_rect = to_unrotated_rect(overlay.rect, derotation)
        placed = place_rect(page_rect, page_size, rotation)
        shape = page.new_shape()
        shape.draw_rect(to_fitz_rect(placed, page_size))
        shape.finish(
            color=None,
            fill=overlay.color_tag.color.to_unit_rgb(),
            fill_opacity=self._options.highlight_opacity,
            width=0,
        )
        shape.commit()

    def _draw_text_box(
        self,
        page: fitz.Page,
        overlay: TextBoxOverlay,
        page_size: PageSize,
        rotation: int,
        derotation: fitz.Matrix,
    ) -> None:
        # the stored point is the top of the text; PyMuPDF wants the baseline
        ascent = self._ascender * self._options.font_size
        baseline = Point2D(overlay.position.x, overlay.position.y + ascent)
        anchor = rotate_point(to_unrotated_point(baseline, derotation), page_size, rotation)
        page.insert_text(
            to_fitz_point(anchor, page_size),
            overlay.content,
            fontsize=self._options.font_size,
            fontname=self._options.font_name,
            color=self._options.text_color,
        )
