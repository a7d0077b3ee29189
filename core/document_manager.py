from __future__ import annotations
from enum import Enum, auto
from pathlib import Path
from typing import Optional
import logging

from PyQt6.QtCore import QObject, pyqtSignal

from core.error_types import (
    Result,
    Success,
    Failure,
    NoDocumentLoadedError,
)
from core.pdf_engine import PDFEngine, PDFDocument
from utils.file_ops import read_file_bytes

logger = logging.getLogger(__name__)


class DocumentState(Enum):
    """Document lifecycle states."""
    UNLOADED = auto()
    LOADING = auto()
    LOADED = auto()
    ERROR = auto()


class DocumentManager(QObject):
    """
    Owns the single document open in the viewer.

    Loading a new document always releases the previous one first, and a
    load that fails halfway leaves nothing open. The manager is also a
    context manager so the shell can scope the document to its own lifetime.

    Signals:
        document_loaded: Emitted with the new PDFDocument
        document_closed: Emitted after the current document was released
        load_failed: Emitted with the AppError of a failed load
    """

    document_loaded = pyqtSignal(object)
    document_closed = pyqtSignal()
    load_failed = pyqtSignal(object)

    def __init__(self, pdf_engine: Optional[PDFEngine] = None):
        super().__init__()

        self._pdf_engine = pdf_engine or PDFEngine()
        self._document: Optional[PDFDocument] = None
        self._state = DocumentState.UNLOADED
        self._last_error_message: Optional[str] = None

    def __enter__(self) -> DocumentManager:
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback) -> None:
        self.close()

    @property
    def pdf_engine(self) -> PDFEngine:
        return self._pdf_engine

    @property
    def state(self) -> DocumentState:
        return self._state

    @property
    def document(self) -> Optional[PDFDocument]:
        return self._document

    @property
    def has_document(self) -> bool:
        return self._document is not None and self._document.is_open()

    @property
    def last_error_message(self) -> Optional[str]:
        return self._last_error_message

    def require_document(self) -> Result[PDFDocument]:
        """The loaded document, or NoDocumentLoadedError."""
        if not self.has_document:
            return Failure(NoDocumentLoadedError(message="No document is loaded"))
        return Success(self._document)

    def load_bytes(
        self,
        data: bytes,
        name: str = "document.pdf",
        password: Optional[str] = None,
    ) -> Result[PDFDocument]:
        """
        Replace the current document with one opened from ``data``.

        The current document stays loaded until the new one has opened, so a
        failed load leaves it untouched.

        Args:
            data: Raw PDF bytes.
            name: Display name.
            password: Optional password for encrypted PDFs.

        Returns:
            Result containing the newly loaded document.
        """
        previous_state = self._state
        self._state = DocumentState.LOADING

        result = self._pdf_engine.load_document(data, name=name, password=password)
        if result.is_failure():
            error = result.get_error()
            error.log(logger)
            self._state = previous_state if self.has_document else DocumentState.ERROR
            self._last_error_message = error.message
            self.load_failed.emit(error)
            return result

        self.close()
        self._document = result.unwrap()
        self._state = DocumentState.LOADED
        self._last_error_message = None
        self.document_loaded.emit(self._document)
        return result

    def load_file(self, file_path: Path, password: Optional[str] = None) -> Result[PDFDocument]:
        """Read a file from disk and load it as the current document."""
        file_path = Path(file_path)
        read_result = read_file_bytes(file_path)
        if read_result.is_failure():
            error = read_result.get_error()
            error.log(logger)
            self._last_error_message = error.message
            self.load_failed.emit(error)
            return read_result

        return self.load_bytes(read_result.unwrap(), name=file_path.name, password=password)

    def close(self) -> None:
        """Release the current document, if any."""
        document = self._document
        self._document = None
        if document is None:
            return

        try:
            document.close()
        finally:
            self._state = DocumentState.UNLOADED
            logger.info(f"Closed document: {document.name}")
            self.document_closed.emit()
