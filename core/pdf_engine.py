from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict, List
import logging
import threading

import fitz

from core.error_types import (
    Result,
    Success,
    Failure,
    PDFError,
    DocumentLoadFailedError,
)
from utils.geometry import PageSize, Rect2D

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageInfo:
    """Immutable container for PDF page information."""

    page_number: int
    width: float
    height: float
    rotation: int = 0

    @property
    def size(self) -> PageSize:
        return PageSize(self.width, self.height)


@dataclass(frozen=True)
class TextWord:
    """One word of a page's text layer, in page points (top-left origin)."""

    rect: Rect2D
    text: str
    block: int = 0
    line: int = 0
    word: int = 0


@dataclass
class PDFDocument:
    """Wrapper around a PyMuPDF document opened from an in-memory buffer."""

    name: str
    data: bytes
    document: fitz.Document
    page_info_cache: Dict[int, PageInfo] = field(default_factory=dict)
    word_cache: Dict[int, List[TextWord]] = field(default_factory=dict)
    _lock: threading.RLock = field(default_factory=threading.RLock)

    def __enter__(self) -> PDFDocument:
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying PDF document and drop cached page data."""
        with self._lock:
            if self.document is not None and not self.document.is_closed:
                self.document.close()
                logger.debug(f"Closed document handle: {self.name}")
            self.page_info_cache.clear()
            self.word_cache.clear()

    def is_open(self) -> bool:
        """Check if the document is still open."""
        return self.document is not None and not self.document.is_closed

    @property
    def page_count(self) -> int:
        """Get the total number of pages."""
        return len(self.document) if self.is_open() else 0

    def _check_page(self, page_number: int) -> Optional[PDFError]:
        if not self.is_open():
            return PDFError(message="Document is closed")

        if page_number < 0 or page_number >= self.page_count:
            return PDFError(
                message=f"Page number {page_number} out of range (0-{self.page_count - 1})",
                page_number=page_number,
            )
        return None

    def get_page_info(self, page_number: int) -> Result[PageInfo]:
        """
        Get information about a specific page.

        Width and height are those of the page as displayed, i.e. with the
        page's own rotation flag applied, which is how it gets rendered.

        Args:
            page_number: Zero-based page index.

        Returns:
            Result containing PageInfo or error.
        """
        error = self._check_page(page_number)
        if error is not None:
            return Failure(error)

        with self._lock:
            if page_number in self.page_info_cache:
                return Success(self.page_info_cache[page_number])

            try:
                page = self.document[page_number]
                rect = page.rect

                page_info = PageInfo(
                    page_number=page_number,
                    width=rect.width,
                    height=rect.height,
                    rotation=page.rotation,
                )

                self.page_info_cache[page_number] = page_info
                return Success(page_info)

            except (RuntimeError, ValueError) as exception:
                return Failure(PDFError(
                    message=f"Failed to get page info: {str(exception)}",
                    page_number=page_number,
                ))

    def get_page_words(self, page_number: int) -> Result[List[TextWord]]:
        """
        Get the words of a page's text layer in reading order.

        Args:
            page_number: Zero-based page index.

        Returns:
            Result containing the page's words.
        """
        error = self._check_page(page_number)
        if error is not None:
            return Failure(error)

        with self._lock:
            if page_number in self.word_cache:
                return Success(self.word_cache[page_number])

            try:
                page = self.document[page_number]
                # word boxes come unrotated; map them onto the page as displayed
                to_displayed = page.rotation_matrix
                words = []
                for x0, y0, x1, y1, text, block, line, word in page.get_text("words"):
                    box = fitz.Rect(x0, y0, x1, y1) * to_displayed
                    words.append(TextWord(
                        rect=Rect2D(box.x0, box.y0, box.width, box.height),
                        text=text,
                        block=block,
                        line=line,
                        word=word,
                    ))
                words.sort(key=lambda item: (item.block, item.line, item.word))

                self.word_cache[page_number] = words
                return Success(words)

            except (RuntimeError, ValueError) as exception:
                return Failure(PDFError(
                    message=f"Failed to extract words: {str(exception)}",
                    page_number=page_number,
                ))


class PDFEngine:
    """
    Opens PDF byte buffers and renders their pages.
    Rasterization stays here so the annotation engine only ever sees geometry.
    """

    def load_document(
        self,
        data: bytes,
        name: str = "document.pdf",
        password: Optional[str] = None,
    ) -> Result[PDFDocument]:
        """
        Load a PDF document from an in-memory buffer.

        Args:
            data: Raw document bytes.
            name: Display name, usually the picked file's name.
            password: Optional password for encrypted PDFs.

        Returns:
            Result containing PDFDocument or error.
        """
        if not data:
            return Failure(DocumentLoadFailedError(
                message=f"Document is empty: {name}",
            ))

        fitz_document = None
        try:
            fitz_document = fitz.open(stream=data, filetype="pdf")

            if fitz_document.needs_pass:
                if password is None or not fitz_document.authenticate(password):
                    fitz_document.close()
                    return Failure(DocumentLoadFailedError(
                        message=f"PDF is encrypted and the password is missing or wrong: {name}",
                    ))

            if len(fitz_document) == 0:
                fitz_document.close()
                return Failure(DocumentLoadFailedError(
                    message=f"PDF has no pages: {name}",
                ))

            pdf_document = PDFDocument(
                name=name,
                data=bytes(data),
                document=fitz_document,
            )

            logger.info(f"Loaded document: {name} ({pdf_document.page_count} pages)")
            return Success(pdf_document)

        except fitz.FileDataError:
            if fitz_document is not None:
                fitz_document.close()
            return Failure(DocumentLoadFailedError(
                message=f"PDF file is corrupted: {name}",
            ))
        except Exception as exception:
            if fitz_document is not None and not fitz_document.is_closed:
                fitz_document.close()
            return Failure(DocumentLoadFailedError(
                message=f"Failed to load PDF: {str(exception)}",
            ))

    def render_page_to_pixmap(
        self,
        document: PDFDocument,
        page_number: int,
        scale: float = 1.0,
    ) -> Result[fitz.Pixmap]:
        """
        Render a page to a pixmap.

        Args:
            document: The PDF document.
            page_number: Zero-based page index.
            scale: Zoom scale factor; one point maps to ``scale`` pixels.

        Returns:
            Result containing the rendered pixmap.
        """
        if not document.is_open():
            return Failure(PDFError(message="Document is closed"))

        if page_number < 0 or page_number >= document.page_count:
            return Failure(PDFError(
                message=f"Page number {page_number} out of range",
                page_number=page_number,
            ))

        try:
            with document._lock:
                page = document.document[page_number]
                pixmap = page.get_pixmap(
                    matrix=fitz.Matrix(scale, scale),
                    alpha=False,
                )
            return Success(pixmap)

        except (RuntimeError, ValueError) as exception:
            return Failure(PDFError(
                message=f"Failed to render page: {str(exception)}",
                page_number=page_number,
            ))
