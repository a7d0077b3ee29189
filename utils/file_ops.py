from __future__ import annotations
from pathlib import Path
import os
import tempfile
import logging

from core.error_types import (
    Result,
    Success,
    Failure,
    FileSystemError,
    FileNotFoundError as AppFileNotFoundError,
    FilePermissionError as AppFilePermissionError,
)

logger = logging.getLogger(__name__)


def read_file_bytes(file_path: Path) -> Result[bytes]:
    """
    Read file contents as bytes.

    Args:
        file_path: Path to the file.

    Returns:
        Result containing the file bytes.
    """
    try:
        file_path = Path(file_path).resolve()

        if not file_path.exists():
            return Failure(AppFileNotFoundError(
                message=f"File not found: {file_path}",
                path=file_path,
                operation="read",
            ))

        with open(file_path, "rb") as file:
            return Success(file.read())

    except PermissionError:
        return Failure(AppFilePermissionError(
            message=f"Permission denied: {file_path}",
            path=file_path,
            operation="read",
        ))
    except OSError as exception:
        return Failure(FileSystemError(
            message=f"Failed to read file: {str(exception)}",
            path=file_path,
            operation="read",
        ))


def write_file_bytes(
    file_path: Path,
    data: bytes,
    overwrite: bool = True,
) -> Result[Path]:
    """
    Write bytes to a file atomically.

    The data goes to a temporary file next to the target which is then moved
    into place, so a failed write never leaves a truncated file behind.

    Args:
        file_path: Path to the file.
        data: Bytes to write.
        overwrite: Whether to overwrite existing file.

    Returns:
        Result containing the file path.
    """
    temp_path = None
    try:
        file_path = Path(file_path).resolve()

        if file_path.exists() and not overwrite:
            return Failure(FileSystemError(
                message=f"File already exists: {file_path}",
                path=file_path,
                operation="write",
            ))

        file_path.parent.mkdir(parents=True, exist_ok=True)

        descriptor, temp_name = tempfile.mkstemp(
            prefix=f".{file_path.name}.",
            suffix=".part",
            dir=file_path.parent,
        )
        temp_path = Path(temp_name)
        with os.fdopen(descriptor, "wb") as file:
            file.write(data)

        os.replace(temp_path, file_path)
        temp_path = None

        logger.debug(f"Wrote {len(data)} bytes to {file_path}")
        return Success(file_path)

    except PermissionError:
        return Failure(AppFilePermissionError(
            message=f"Permission denied: {file_path}",
            path=file_path,
            operation="write",
        ))
    except OSError as exception:
        return Failure(FileSystemError(
            message=f"Failed to write file: {str(exception)}",
            path=file_path,
            operation="write",
        ))
    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
