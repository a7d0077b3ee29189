"""
Bake Service

Runs the export of an annotated document off the GUI thread:
- Snapshot of the overlay store taken when the export is requested
- At most one bake in flight; further requests are rejected
- Output written atomically, so a failed export leaves no file behind
"""

from __future__ import annotations
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Sequence
import threading
import logging
import time

from PyQt6.QtCore import QObject, pyqtSignal

from core.bake_engine import BakeOptions, BakeResult, DocumentBakeEngine
from core.error_types import (
    Result,
    Success,
    Failure,
    BakeInProgressError,
    capture_exception,
    BakeError,
)
from core.overlay_store import OverlayStore
from models.overlay import Overlay
from utils.file_ops import write_file_bytes

logger = logging.getLogger(__name__)


class BakeService(QObject):
    """
    Service for exporting the loaded document with its overlays baked in.

    Signals:
        bake_started: Emitted when a bake has been accepted
        bake_completed: Emitted with the BakeResult after the file was written
        bake_failed: Emitted with the AppError of a failed bake
    """

    bake_started = pyqtSignal()
    bake_completed = pyqtSignal(object)  # BakeResult
    bake_failed = pyqtSignal(object)  # AppError

    def __init__(self, engine: Optional[DocumentBakeEngine] = None):
        super().__init__()

        self._engine = engine or DocumentBakeEngine()
        self._lock = threading.Lock()
        self._in_flight = False

        self._thread_pool = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="BakeService",
        )

    @property
    def options(self) -> BakeOptions:
        return self._engine.options

    @property
    def is_busy(self) -> bool:
        with self._lock:
            return self._in_flight

    def _acquire(self) -> bool:
        with self._lock:
            if self._in_flight:
                return False
            self._in_flight = True
            return True

    def _release(self) -> None:
        with self._lock:
            self._in_flight = False

    def _busy_error(self) -> BakeInProgressError:
        return BakeInProgressError(message="An export is already running")

    def bake_now(
        self,
        document_bytes: Optional[bytes],
        overlays: Sequence[Overlay],
        rotation: int,
        output_path: Optional[Path] = None,
    ) -> Result[BakeResult]:
        """
        Bake synchronously on the calling thread.

        Args:
            document_bytes: The original document, or None when nothing is loaded.
            overlays: Overlays to bake; pass a snapshot, not a live view.
            rotation: Document-wide rotation to write.
            output_path: Where to write the result. Nothing is written when None.

        Returns:
            Result containing the BakeResult.
        """
        if not self._acquire():
            error = self._busy_error()
            error.log(logger)
            return Failure(error)

        try:
            result = self._run(document_bytes, tuple(overlays), rotation, output_path)
        finally:
            self._release()
        return self._report(result)

    def bake_async(
        self,
        document_bytes: Optional[bytes],
        store: OverlayStore,
        rotation: int,
        output_path: Path,
    ) -> Result[Future]:
        """
        Bake on the worker thread.

        The store is snapshotted before this returns, so edits made while
        the bake runs do not leak into the output. Completion is reported
        through ``bake_completed`` or ``bake_failed``.

        Returns:
            Result containing the Future of the bake, or BakeInProgressError.
        """
        if not self._acquire():
            error = self._busy_error()
            error.log(logger)
            self.bake_failed.emit(error)
            return Failure(error)

        overlays = store.snapshot()
        self.bake_started.emit()

        def bake_task() -> Result[BakeResult]:
            try:
                result = self._run(document_bytes, overlays, rotation, output_path)
            finally:
                self._release()
            return self._report(result)

        return Success(self._thread_pool.submit(bake_task))

    def _run(
        self,
        document_bytes: Optional[bytes],
        overlays: Sequence[Overlay],
        rotation: int,
        output_path: Optional[Path],
    ) -> Result[BakeResult]:
        start_time = time.time()

        try:
            result = self._engine.bake(document_bytes, overlays, rotation)
        except Exception:
            result = Failure(capture_exception(BakeError, "Unexpected failure while baking"))

        if result.is_success() and output_path is not None:
            bake_result = result.unwrap()
            write_result = write_file_bytes(Path(output_path), bake_result.data)
            if write_result.is_failure():
                result = write_result

        if result.is_success():
            elapsed_ms = (time.time() - start_time) * 1000
            logger.info(f"Export finished in {elapsed_ms:.0f} ms")
        return result

    def _report(self, result: Result[BakeResult]) -> Result[BakeResult]:
        """Announce the outcome once the service is idle again."""
        if result.is_failure():
            error = result.get_error()
            error.log(logger)
            self.bake_failed.emit(error)
        else:
            self.bake_completed.emit(result.unwrap())
        return result

    def shutdown(self) -> None:
        """Wait for a running bake and stop the worker."""
        logger.info("Shutting down BakeService...")
        self._thread_pool.shutdown(wait=True)
