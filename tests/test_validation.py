"""Tests for upload validation and the status transition table."""

from __future__ import annotations

import pytest

from docflow.validation import (
    ALLOWED_MIME_TYPES,
    MAX_FILE_SIZE,
    DocumentStatus,
    UploadValidationError,
    can_transition,
    ensure_valid_upload,
    validate_upload,
)


def test_max_file_size_is_ten_mebibytes() -> None:
    assert MAX_FILE_SIZE == 10_485_760


def test_size_at_limit_is_accepted() -> None:
    result = validate_upload("exact-limit.pdf", MAX_FILE_SIZE, "application/pdf")
    assert result.accepted
    assert result.reason is None


def test_size_over_limit_is_rejected() -> None:
    result = validate_upload("large.pdf", MAX_FILE_SIZE + 1, "application/pdf")
    assert not result.accepted
    assert result.code == "size_exceeded"
    assert "exceeds maximum" in result.reason


@pytest.mark.parametrize("size", [0, -1, None, 1.5, True])
def test_non_positive_or_non_integer_size_is_rejected(size) -> None:
    result = validate_upload("file.pdf", size, "application/pdf")
    assert not result.accepted
    assert result.code == "invalid_size"


@pytest.mark.parametrize("mime_type", ["application/x-msdownload", "text/html", "", None])
def test_disallowed_mime_type_is_rejected(mime_type) -> None:
    result = validate_upload("malware.exe", 1024, mime_type)
    assert not result.accepted
    assert result.code == "type_not_allowed"
    assert "not allowed" in result.reason


@pytest.mark.parametrize("mime_type", ALLOWED_MIME_TYPES)
def test_every_allowed_mime_type_is_accepted(mime_type: str) -> None:
    assert validate_upload("file", 1024, mime_type).accepted


def test_mime_parameters_and_case_are_ignored() -> None:
    assert validate_upload("notes.txt", 12, "Text/Plain; charset=utf-8").accepted


@pytest.mark.parametrize("filename", ["", None, "a" * 256])
def test_filename_length_is_bounded(filename) -> None:
    result = validate_upload(filename, 10, "text/plain")
    assert not result.accepted
    assert result.code == "invalid_filename"


def test_filename_of_255_characters_is_accepted() -> None:
    assert validate_upload("a" * 255, 10, "text/plain").accepted


def test_ensure_valid_upload_raises_with_code() -> None:
    with pytest.raises(UploadValidationError) as excinfo:
        ensure_valid_upload("big.pdf", MAX_FILE_SIZE + 1, "application/pdf")
    assert excinfo.value.code == "size_exceeded"


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (DocumentStatus.UPLOADING, DocumentStatus.UPLOADED),
        (DocumentStatus.UPLOADING, DocumentStatus.ERROR),
        (DocumentStatus.UPLOADED, DocumentStatus.PROCESSING),
        (DocumentStatus.UPLOADED, DocumentStatus.PARSE_ERROR),
        (DocumentStatus.PROCESSING, DocumentStatus.REVIEW),
        (DocumentStatus.PROCESSING, DocumentStatus.PARSED),
        (DocumentStatus.PROCESSING, DocumentStatus.PARSE_ERROR),
        (DocumentStatus.REVIEW, DocumentStatus.COMPLETED),
    ],
)
def test_lifecycle_edges_are_allowed(current, target) -> None:
    assert can_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (DocumentStatus.UPLOADING, DocumentStatus.PROCESSING),
        (DocumentStatus.UPLOADING, DocumentStatus.REVIEW),
        (DocumentStatus.UPLOADED, DocumentStatus.COMPLETED),
        (DocumentStatus.PARSED, DocumentStatus.COMPLETED),
        (DocumentStatus.COMPLETED, DocumentStatus.COMPLETED),
        (DocumentStatus.COMPLETED, DocumentStatus.REVIEW),
        (DocumentStatus.ERROR, DocumentStatus.UPLOADED),
    ],
)
def test_skipping_or_reversing_transitions_is_rejected(current, target) -> None:
    assert not can_transition(current, target)


def test_can_transition_accepts_raw_values() -> None:
    assert can_transition("review", "completed")
