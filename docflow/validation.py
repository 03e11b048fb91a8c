"""Upload limits, the MIME allow-list, and the document status vocabulary.

These values are shared with the frontend's pre-upload check; the server-side
checks here are authoritative. The declared MIME type is trusted as sent by the
client and is never compared against the file's magic bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB, inclusive
MAX_FILENAME_LENGTH = 255

ALLOWED_MIME_TYPES: tuple[str, ...] = (
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/gif",
    "text/plain",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)

PDF_MIME_TYPE = "application/pdf"


class DocumentStatus(str, Enum):
    """Lifecycle states of an uploaded document."""

    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    REVIEW = "review"
    PARSED = "parsed"
    COMPLETED = "completed"
    ERROR = "error"
    PARSE_ERROR = "parse_error"


ALLOWED_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.UPLOADING: frozenset(
        {DocumentStatus.UPLOADED, DocumentStatus.ERROR}
    ),
    # PARSE_ERROR covers a failed commit of the PROCESSING step.
    DocumentStatus.UPLOADED: frozenset(
        {DocumentStatus.PROCESSING, DocumentStatus.PARSE_ERROR}
    ),
    DocumentStatus.PROCESSING: frozenset(
        {
            DocumentStatus.REVIEW,
            DocumentStatus.PARSED,
            DocumentStatus.PARSE_ERROR,
            DocumentStatus.ERROR,
        }
    ),
    DocumentStatus.REVIEW: frozenset({DocumentStatus.COMPLETED}),
    DocumentStatus.PARSED: frozenset(),
    DocumentStatus.COMPLETED: frozenset(),
    DocumentStatus.ERROR: frozenset(),
    DocumentStatus.PARSE_ERROR: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: DocumentStatus | str, target: DocumentStatus | str) -> bool:
    """Return ``True`` when ``current -> target`` is an edge of the lifecycle graph."""

    return DocumentStatus(target) in ALLOWED_TRANSITIONS[DocumentStatus(current)]


def normalise_mime_type(mime_type: str | None) -> str:
    """Return the bare, lower-cased media type (parameters such as charset dropped)."""

    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate_upload`."""

    accepted: bool
    reason: str | None = None
    code: str | None = None


class UploadValidationError(ValueError):
    """Raised when an upload candidate is rejected before any side effect."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def validate_upload(
    filename: str | None, file_size: int | None, mime_type: str | None
) -> ValidationResult:
    """Accept or reject an upload candidate with a human-readable reason."""

    if not filename or len(filename) > MAX_FILENAME_LENGTH:
        return ValidationResult(
            False,
            f"Invalid filename: must be 1-{MAX_FILENAME_LENGTH} characters",
            "invalid_filename",
        )
    if (
        isinstance(file_size, bool)
        or not isinstance(file_size, int)
        or file_size <= 0
    ):
        return ValidationResult(
            False, "File size must be a positive integer", "invalid_size"
        )
    if file_size > MAX_FILE_SIZE:
        return ValidationResult(
            False,
            f"File size exceeds maximum of {MAX_FILE_SIZE // (1024 * 1024)}MB",
            "size_exceeded",
        )
    if normalise_mime_type(mime_type) not in ALLOWED_MIME_TYPES:
        return ValidationResult(
            False,
            f"File type not allowed. Allowed: {', '.join(ALLOWED_MIME_TYPES)}",
            "type_not_allowed",
        )
    return ValidationResult(True)


def ensure_valid_upload(
    filename: str | None, file_size: int | None, mime_type: str | None
) -> None:
    """Raise :class:`UploadValidationError` when :func:`validate_upload` rejects."""

    result = validate_upload(filename, file_size, mime_type)
    if not result.accepted:
        raise UploadValidationError(result.code or "invalid", result.reason or "Invalid upload")


__all__ = [
    "ALLOWED_MIME_TYPES",
    "ALLOWED_TRANSITIONS",
    "DocumentStatus",
    "MAX_FILENAME_LENGTH",
    "MAX_FILE_SIZE",
    "PDF_MIME_TYPE",
    "TERMINAL_STATUSES",
    "UploadValidationError",
    "ValidationResult",
    "can_transition",
    "ensure_valid_upload",
    "normalise_mime_type",
    "validate_upload",
]
