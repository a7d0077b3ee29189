from __future__ import annotations
from pathlib import Path
from typing import Optional

from core.error_types import (
    Result,
    Success,
    Failure,
    ValidationError,
)
from utils.geometry import VALID_ROTATIONS


def validate_file_path(
    file_path: str | Path,
    must_exist: bool = True,
    allowed_extensions: Optional[list[str]] = None,
) -> Result[Path]:
    """
    Validate a file path.

    Args:
        file_path: Path to validate.
        must_exist: Whether the file must exist.
        allowed_extensions: List of allowed extensions (e.g., ['.pdf']).

    Returns:
        Result containing the validated Path or validation error.
    """
    try:
        path = Path(file_path).resolve()
    except (OSError, RuntimeError, TypeError):
        return Failure(ValidationError(
            message="Invalid path format",
            field_name="file_path",
            invalid_value=str(file_path),
        ))

    if must_exist and not path.exists():
        return Failure(ValidationError(
            message="File does not exist",
            field_name="file_path",
            invalid_value=str(file_path),
        ))

    if must_exist and not path.is_file():
        return Failure(ValidationError(
            message="Path is not a file",
            field_name="file_path",
            invalid_value=str(file_path),
        ))

    if allowed_extensions:
        normalized_extensions = [ext.lower() if ext.startswith('.') else f'.{ext.lower()}'
                                 for ext in allowed_extensions]
        if path.suffix.lower() not in normalized_extensions:
            return Failure(ValidationError(
                message=f"Invalid file extension. Allowed: {', '.join(normalized_extensions)}",
                field_name="file_path",
                invalid_value=path.suffix,
            ))

    return Success(path)


def validate_page_number(
    page_number: int,
    total_pages: int,
) -> Result[int]:
    """
    Validate a zero-based page index against the page count.

    Args:
        page_number: Page index to validate.
        total_pages: Total number of pages in the document.

    Returns:
        Result containing the validated page index.
    """
    if not isinstance(page_number, int) or isinstance(page_number, bool):
        return Failure(ValidationError(
            message="Page number must be an integer",
            field_name="page_number",
            invalid_value=str(page_number),
        ))

    if page_number < 0:
        return Failure(ValidationError(
            message="Page number must be at least 0",
            field_name="page_number",
            invalid_value=str(page_number),
        ))

    if page_number >= total_pages:
        return Failure(ValidationError(
            message=f"Page number must be at most {total_pages - 1}",
            field_name="page_number",
            invalid_value=str(page_number),
        ))

    return Success(page_number)


def validate_rotation(rotation: int) -> Result[int]:
    """
    Validate and normalize a rotation value.

    Args:
        rotation: Rotation in degrees, any multiple of 90.

    Returns:
        Result containing normalized rotation (0, 90, 180, or 270).
    """
    if not isinstance(rotation, int) or isinstance(rotation, bool):
        return Failure(ValidationError(
            message="Rotation must be an integer",
            field_name="rotation",
            invalid_value=str(rotation),
        ))

    normalized = rotation % 360

    if normalized not in VALID_ROTATIONS:
        return Failure(ValidationError(
            message="Rotation must be a multiple of 90 degrees",
            field_name="rotation",
            invalid_value=str(rotation),
        ))

    return Success(normalized)
