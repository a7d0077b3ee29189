from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import TypeVar, Generic, Optional, Tuple
from pathlib import Path
import traceback
import logging

T = TypeVar("T")


class ErrorSeverity(Enum):
    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CRITICAL = auto()


@dataclass(frozen=True)
class AppError(ABC):
    """Base class for all application errors with rich context."""

    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    severity: ErrorSeverity = ErrorSeverity.ERROR
    source_file: Optional[str] = None
    source_line: Optional[int] = None
    stack_trace: Optional[str] = None

    @abstractmethod
    def error_code(self) -> str:
        """Return unique error code for this error type."""
        pass

    def log(self, logger: logging.Logger) -> None:
        """Log this error with appropriate severity level."""
        log_methods = {
            ErrorSeverity.DEBUG: logger.debug,
            ErrorSeverity.INFO: logger.info,
            ErrorSeverity.WARNING: logger.warning,
            ErrorSeverity.ERROR: logger.error,
            ErrorSeverity.CRITICAL: logger.critical,
        }
        log_method = log_methods.get(self.severity, logger.error)
        log_message = f"[{self.error_code()}] {self.message}"
        if self.source_file:
            log_message += f" at {self.source_file}:{self.source_line}"
        log_method(log_message)


@dataclass(frozen=True)
class NoOwningPageError(AppError):
    """A selection or click landed outside every mounted page."""

    severity: ErrorSeverity = ErrorSeverity.DEBUG
    point: Optional[Tuple[float, float]] = None

    def error_code(self) -> str:
        return "NO_OWNING_PAGE"


@dataclass(frozen=True)
class PageNotMountedError(AppError):
    """Registry lookup for a page that has no frame right now."""

    severity: ErrorSeverity = ErrorSeverity.DEBUG
    page_index: Optional[int] = None

    def error_code(self) -> str:
        return "PAGE_NOT_MOUNTED"


@dataclass(frozen=True)
class NoPagesMountedError(AppError):
    """Registry lookup before the first page was mounted."""

    severity: ErrorSeverity = ErrorSeverity.DEBUG

    def error_code(self) -> str:
        return "NO_PAGES_MOUNTED"


@dataclass(frozen=True)
class PDFError(AppError):
    """Errors related to PDF operations."""

    file_path: Optional[Path] = None
    page_number: Optional[int] = None

    def error_code(self) -> str:
        return "PDF_ERR"


@dataclass(frozen=True)
class DocumentLoadFailedError(PDFError):
    """The document bytes could not be opened as a PDF."""

    def error_code(self) -> str:
        return "DOC_LOAD_ERR"


@dataclass(frozen=True)
class NoDocumentLoadedError(PDFError):
    """An operation needed a loaded document and there is none."""

    severity: ErrorSeverity = ErrorSeverity.WARNING

    def error_code(self) -> str:
        return "NO_DOCUMENT"


@dataclass(frozen=True)
class BakeError(AppError):
    """Drawing overlays into the output document or serializing it failed."""

    page_index: Optional[int] = None
    overlay_id: Optional[str] = None

    def error_code(self) -> str:
        return "BAKE_ERR"


@dataclass(frozen=True)
class BakeInProgressError(BakeError):
    """A bake was requested while another one is still running."""

    severity: ErrorSeverity = ErrorSeverity.WARNING

    def error_code(self) -> str:
        return "BAKE_BUSY"


@dataclass(frozen=True)
class OverlayError(AppError):
    """Errors related to overlay records."""

    overlay_id: Optional[str] = None
    page_index: Optional[int] = None

    def error_code(self) -> str:
        return "OVERLAY_ERR"


@dataclass(frozen=True)
class ValidationError(AppError):
    """Errors related to input validation."""

    field_name: Optional[str] = None
    invalid_value: Optional[str] = None

    def error_code(self) -> str:
        return "VALIDATION_ERR"


@dataclass(frozen=True)
class FileSystemError(AppError):
    """Errors related to file system operations."""

    path: Optional[Path] = None
    operation: Optional[str] = None

    def error_code(self) -> str:
        return "FS_ERR"


@dataclass(frozen=True)
class FileNotFoundError(FileSystemError):
    """Error when file is not found."""

    def error_code(self) -> str:
        return "FS_NOT_FOUND_ERR"


@dataclass(frozen=True)
class FilePermissionError(FileSystemError):
    """Error when file permission denied."""

    def error_code(self) -> str:
        return "FS_PERMISSION_ERR"


class EngineException(Exception):
    """
    Raised by engine lookups that fail as part of normal control flow
    (registry misses, clicks outside every page). Carries the AppError.
    """

    def __init__(self, error: AppError):
        super().__init__(f"[{error.error_code()}] {error.message}")
        self.error = error


class Result(Generic[T], ABC):
    """
    A Result type representing either success or failure.
    Inspired by Rust's Result type for explicit error handling.
    """

    @abstractmethod
    def is_success(self) -> bool:
        """Check if this result represents success."""
        pass

    @abstractmethod
    def is_failure(self) -> bool:
        """Check if this result represents failure."""
        pass

    @abstractmethod
    def unwrap(self) -> T:
        """
        Get the success value.
        Raises RuntimeError if this is a failure.
        """
        pass

    @abstractmethod
    def unwrap_or(self, default: T) -> T:
        """Get the success value or return default if failure."""
        pass

    @abstractmethod
    def get_error(self) -> Optional[AppError]:
        """Get the error if this is a failure, None otherwise."""
        pass


@dataclass
class Success(Result[T]):
    """Represents a successful result containing a value."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def get_error(self) -> Optional[AppError]:
        return None


@dataclass
class Failure(Result[T]):
    """Represents a failed result containing an error."""

    error: AppError

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> T:
        raise RuntimeError(f"Attempted to unwrap a Failure: {self.error.message}")

    def unwrap_or(self, default: T) -> T:
        return default

    def get_error(self) -> Optional[AppError]:
        return self.error


def capture_exception(
    error_class: type[AppError],
    message: str,
    **extra_fields
) -> AppError:
    """
    Capture current exception context and create an error with stack trace.
    """
    stack = traceback.format_exc()
    frame = traceback.extract_stack()[-2] if len(traceback.extract_stack()) >= 2 else None

    return error_class(
        message=message,
        stack_trace=stack,
        source_file=frame.filename if frame else None,
        source_line=frame.lineno if frame else None,
        **extra_fields
    )
