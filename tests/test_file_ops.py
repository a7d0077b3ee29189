from __future__ import annotations

from core.error_types import FileSystemError
from utils.file_ops import read_file_bytes, write_file_bytes
from utils.validators import validate_file_path, validate_page_number, validate_rotation


def test_write_is_atomic_and_leaves_no_temp_files(tmp_path) -> None:
    target = tmp_path / "out" / "annotated.pdf"

    result = write_file_bytes(target, b"%PDF-1.7 first")
    assert result.is_success()
    assert write_file_bytes(target, b"%PDF-1.7 second").is_success()

    assert target.read_bytes() == b"%PDF-1.7 second"
    assert [path.name for path in target.parent.iterdir()] == ["annotated.pdf"]


def test_write_refuses_to_overwrite_when_asked(tmp_path) -> None:
    target = tmp_path / "annotated.pdf"
    target.write_bytes(b"keep me")

    result = write_file_bytes(target, b"replacement", overwrite=False)

    assert result.is_failure()
    assert isinstance(result.get_error(), FileSystemError)
    assert target.read_bytes() == b"keep me"


def test_read_missing_file_fails(tmp_path) -> None:
    result = read_file_bytes(tmp_path / "missing.pdf")
    assert result.is_failure()
    assert result.get_error().error_code() == "FS_NOT_FOUND_ERR"


def test_validate_file_path_checks_extension(tmp_path) -> None:
    document = tmp_path / "paper.PDF"
    document.write_bytes(b"%PDF")
    notes = tmp_path / "notes.txt"
    notes.write_text("hello")

    assert validate_file_path(document, allowed_extensions=[".pdf"]).unwrap() == document.resolve()
    assert validate_file_path(notes, allowed_extensions=["pdf"]).is_failure()
    assert validate_file_path(tmp_path / "absent.pdf").is_failure()
    assert validate_file_path(tmp_path).is_failure()


def test_validate_page_number() -> None:
    assert validate_page_number(0, 3).unwrap() == 0
    assert validate_page_number(3, 3).is_failure()
    assert validate_page_number(-1, 3).is_failure()
    assert validate_page_number(True, 3).is_failure()


def test_validate_rotation_normalizes() -> None:
    assert validate_rotation(-90).unwrap() == 270
    assert validate_rotation(360).unwrap() == 0
    assert validate_rotation(45).get_error().error_code() == "VALIDATION_ERR"
