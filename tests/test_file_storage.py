"""Tests for the filesystem storage service."""

from __future__ import annotations

from pathlib import Path

import pytest

from docflow.services.file_storage import FileStorage, PathTraversalError, sanitize_filename


@pytest.mark.parametrize(
    ("original", "expected"),
    [
        ("notes.txt", "notes.txt"),
        ("my report (final).pdf", "my_report__final_.pdf"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\invoice.pdf", "invoice.pdf"),
        ("résumé.docx", "r_sum_.docx"),
    ],
)
def test_sanitize_filename(original: str, expected: str) -> None:
    assert sanitize_filename(original) == expected


@pytest.mark.parametrize("original", ["", "..", "dir/"])
def test_sanitize_filename_generates_name_when_nothing_is_left(original: str) -> None:
    assert sanitize_filename(original).startswith("document-")


def test_save_writes_bytes_under_record_directory(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path)

    relative = storage.save(7, "../evil/notes v1.txt", b"hello world!")

    assert relative == "7/notes_v1.txt"
    assert (tmp_path / "7" / "notes_v1.txt").read_bytes() == b"hello world!"
    assert storage.resolve(relative) == tmp_path / "7" / "notes_v1.txt"
    assert storage.exists(relative)


def test_save_creates_missing_root(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path / "nested" / "uploads")
    relative = storage.save(1, "a.txt", b"x")
    assert storage.exists(relative)


@pytest.mark.parametrize(
    "stored_path",
    ["../secret.txt", "1/../../secret.txt", "/etc/passwd", "..", ""],
)
def test_resolve_rejects_paths_outside_root(tmp_path: Path, stored_path: str) -> None:
    storage = FileStorage(tmp_path)
    with pytest.raises(PathTraversalError):
        storage.resolve(stored_path)
    assert storage.exists(stored_path) is False


def test_resolve_normalises_inner_segments(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path)
    assert storage.resolve("3/./sub/../a.pdf") == tmp_path / "3" / "a.pdf"


def test_exists_is_false_for_missing_file(tmp_path: Path) -> None:
    assert FileStorage(tmp_path).exists("9/missing.pdf") is False


def test_remove_deletes_record_directory(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path)
    relative = storage.save(4, "a.txt", b"data")

    assert storage.remove(4) is True
    assert not storage.exists(relative)
    assert storage.remove(4) is False
