"""Document upload pipeline and the review/approval transition.

An upload runs synchronously inside the request: the record is created, the
bytes are stored, and PDFs go through text extraction and structured
extraction. Each status change is committed on its own, so an interrupted run
leaves the last committed status behind for inspection.
"""

from __future__ import annotations

import logging
from typing import Callable, NoReturn

from sqlmodel import Session, select

from ..config import Settings
from ..models import Document
from ..observability import metrics_registry
from ..validation import (
    DocumentStatus,
    can_transition,
    ensure_valid_upload,
    normalise_mime_type,
)
from .file_storage import FileStorage
from .structured_extraction import ExtractedData, extract_structured_data
from .text_extraction import extract_text

LOGGER = logging.getLogger(__name__)

_STAGE_FAILURES = {
    "storage": "Upload failed",
    "text": "Text extraction failed",
    "ai": "Structured extraction failed",
}

TextExtractor = Callable[[bytes], str]
DataExtractor = Callable[[str], ExtractedData]


class DocumentNotFoundError(LookupError):
    """Raised when no document exists for an id."""

    def __init__(self, document_id: int) -> None:
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id


class DocumentStateError(RuntimeError):
    """Raised when an operation's status precondition is not met."""


class InvalidTransitionError(DocumentStateError):
    """Raised when a status change is not an edge of the lifecycle graph."""

    def __init__(self, current: DocumentStatus, target: DocumentStatus) -> None:
        super().__init__(
            f"Illegal status transition {current.value!r} -> {target.value!r}"
        )
        self.current = current
        self.target = target


class DocumentProcessingError(RuntimeError):
    """Raised when a pipeline stage fails after the record has been created."""

    def __init__(self, message: str, *, document_id: int | None, stage: str) -> None:
        super().__init__(message)
        self.document_id = document_id
        self.stage = stage


def advance(document: Document, status: DocumentStatus) -> None:
    """Move ``document`` to ``status``, enforcing the lifecycle graph."""

    current = DocumentStatus(document.status)
    if not can_transition(current, status):
        raise InvalidTransitionError(current, status)
    document.status = status


def _persist(session: Session, document: Document) -> Document:
    session.add(document)
    session.commit()
    session.refresh(document)
    return document


class DocumentPipeline:
    """Sequence storage, extraction, and status updates for one upload."""

    def __init__(
        self,
        settings: Settings,
        *,
        storage: FileStorage | None = None,
        text_extractor: TextExtractor | None = None,
        data_extractor: DataExtractor | None = None,
    ) -> None:
        self._settings = settings
        self._storage = storage or FileStorage(settings.upload_dir)
        self._extract_text = text_extractor or extract_text
        self._extract_data = data_extractor or (
            lambda text: extract_structured_data(text, settings=settings)
        )

    @property
    def storage(self) -> FileStorage:
        return self._storage

    @property
    def success_status(self) -> DocumentStatus:
        if self._settings.require_review:
            return DocumentStatus.REVIEW
        return DocumentStatus.PARSED

    def run(
        self,
        session: Session,
        *,
        filename: str,
        mime_type: str,
        file_size: int,
        data: bytes,
    ) -> Document:
        """Validate, store, and (for PDFs) extract; return the finished record.

        Raises :class:`~docflow.validation.UploadValidationError` before any
        side effect, and :class:`DocumentProcessingError` once the record exists.
        """

        ensure_valid_upload(filename, file_size, mime_type)
        mime_type = normalise_mime_type(mime_type)

        document = _persist(
            session,
            Document(
                filename=filename,
                file_size=file_size,
                mime_type=mime_type,
                status=DocumentStatus.UPLOADING,
            ),
        )
        LOGGER.info("Document %s created for %r (%s)", document.id, filename, mime_type)

        # Commit failures between steps land in the same failure path as the steps.
        stage = "storage"
        try:
            stored_path = self._storage.save(document.id, filename, data)
            document.stored_path = stored_path
            advance(document, DocumentStatus.UPLOADED)
            _persist(session, document)
            LOGGER.info("Document %s stored at %s", document.id, stored_path)

            if not document.is_pdf:
                metrics_registry.upload_finished(document.status.value, stored_bytes=len(data))
                return document

            stage = "text"
            advance(document, DocumentStatus.PROCESSING)
            _persist(session, document)
            text = self._extract_text(data)

            stage = "ai"
            extracted = self._extract_data(text)
            document.extracted_data = extracted.to_record()
            advance(document, self.success_status)
            _persist(session, document)
        except Exception as exc:
            self._fail(
                session,
                document,
                f"{_STAGE_FAILURES[stage]}: {exc}",
                stage=stage,
                stored_bytes=len(data),
                cause=exc,
            )

        LOGGER.info("Document %s extracted; status=%s", document.id, document.status.value)
        metrics_registry.upload_finished(document.status.value, stored_bytes=len(data))
        return document

    def _fail(
        self,
        session: Session,
        document: Document,
        message: str,
        *,
        stage: str,
        cause: Exception,
        stored_bytes: int,
    ) -> NoReturn:
        """Record a terminal failure status, then raise :class:`DocumentProcessingError`."""

        session.rollback()
        session.refresh(document)
        # Failures after the stored path is committed are parse failures.
        if document.stored_path:
            failure = DocumentStatus.PARSE_ERROR
        else:
            failure = DocumentStatus.ERROR
            stored_bytes = 0
            self._storage.remove(document.id)
        advance(document, failure)
        document.error_message = message
        try:
            _persist(session, document)
        except Exception:
            session.rollback()
            LOGGER.exception(
                "Could not record status=%s for document %s", failure.value, document.id
            )
        LOGGER.error(
            "Document %s failed at stage=%s; status=%s: %s",
            document.id,
            stage,
            failure.value,
            cause,
        )
        metrics_registry.upload_finished(
            failure.value, stored_bytes=stored_bytes, failed_stage=stage
        )
        raise DocumentProcessingError(message, document_id=document.id, stage=stage) from cause


def list_documents(*, session: Session) -> list[Document]:
    """Return every stored document in insertion order."""

    statement = select(Document).order_by(Document.id)
    return list(session.exec(statement))


def get_document(*, session: Session, document_id: int) -> Document:
    document = session.get(Document, document_id)
    if document is None:
        raise DocumentNotFoundError(document_id)
    return document


def approve_document(*, session: Session, document_id: int) -> Document:
    """Mark a review-pending document as completed."""

    document = get_document(session=session, document_id=document_id)
    if DocumentStatus(document.status) != DocumentStatus.REVIEW:
        raise DocumentStateError("Document must be in review status to complete")
    advance(document, DocumentStatus.COMPLETED)
    _persist(session, document)
    LOGGER.info("Document %s approved", document.id)
    return document


def delete_document(
    *, session: Session, document_id: int, storage: FileStorage | None = None
) -> None:
    """Remove a document record and, when ``storage`` is given, its stored bytes."""

    document = get_document(session=session, document_id=document_id)
    session.delete(document)
    session.commit()
    if storage is not None:
        storage.remove(document_id)
    LOGGER.info("Document %s deleted", document_id)


__all__ = [
    "DocumentNotFoundError",
    "DocumentPipeline",
    "DocumentProcessingError",
    "DocumentStateError",
    "InvalidTransitionError",
    "advance",
    "approve_document",
    "delete_document",
    "get_document",
    "list_documents",
]
