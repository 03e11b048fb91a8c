"""Document list, upload, approval, and delete endpoints."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    UploadFile,
    status,
)
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from ..config import Settings, get_settings
from ..database import get_session
from ..middleware import get_request_id
from ..models import Document
from ..services.documents import (
    DocumentNotFoundError,
    DocumentPipeline,
    DocumentProcessingError,
    DocumentStateError,
    approve_document,
    delete_document,
    get_document,
    list_documents,
)
from ..services.file_storage import FileStorage
from ..validation import MAX_FILE_SIZE, UploadValidationError

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])

CHUNK_SIZE = 1024 * 1024  # 1MB

_VALIDATION_STATUS = {
    "size_exceeded": 413,
    "invalid_size": 422,
}


class StatusUpdateRequest(BaseModel):
    """Approval payload; ``completed`` is the only status a client may set."""

    status: Literal["completed"]


class DeleteResponse(BaseModel):
    success: bool


def get_storage(settings: Settings = Depends(get_settings)) -> FileStorage:
    return FileStorage(settings.upload_dir)


def get_document_pipeline(
    settings: Settings = Depends(get_settings),
    storage: FileStorage = Depends(get_storage),
) -> DocumentPipeline:
    """Return the upload pipeline used by the upload endpoint."""

    return DocumentPipeline(settings, storage=storage)


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail="Document not found"
    )


async def _read_upload(upload: UploadFile) -> bytes:
    """Read the upload body, refusing to buffer more than the size limit."""

    chunks: list[bytes] = []
    total = 0
    try:
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > MAX_FILE_SIZE:
                raise HTTPException(
                    status_code=413,
                    detail=f"File size exceeds maximum of {MAX_FILE_SIZE // (1024 * 1024)}MB",
                )
            chunks.append(chunk)
    finally:
        await upload.close()
    return b"".join(chunks)


@router.get("/documents", response_model=list[Document])
async def get_documents(*, session: Session = Depends(get_session)) -> list[Document]:
    """Return every stored document."""

    return list_documents(session=session)


@router.get("/documents/{document_id}", response_model=Document)
async def read_document(
    document_id: int,
    *,
    session: Session = Depends(get_session),
) -> Document:
    """Return stored metadata and extraction results for a document."""

    try:
        return get_document(session=session, document_id=document_id)
    except DocumentNotFoundError:
        raise _not_found() from None


@router.post(
    "/documents/upload",
    response_model=Document,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    *,
    file: UploadFile = File(...),
    file_size: int | None = Form(default=None),
    session: Session = Depends(get_session),
    pipeline: DocumentPipeline = Depends(get_document_pipeline),
):
    """Store an uploaded file and run the processing pipeline synchronously."""

    data = await _read_upload(file)
    declared_size = file_size if file_size is not None else len(data)

    try:
        return await run_in_threadpool(
            pipeline.run,
            session,
            filename=file.filename or "",
            mime_type=file.content_type or "",
            file_size=declared_size,
            data=data,
        )
    except UploadValidationError as exc:
        LOGGER.info("Rejected upload %r: %s", file.filename, exc.message)
        raise HTTPException(
            status_code=_VALIDATION_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
            detail=exc.message,
        ) from exc
    except DocumentProcessingError as exc:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": str(exc),
                "document_id": exc.document_id,
                "stage": exc.stage,
                "request_id": get_request_id(),
            },
        )


@router.post("/documents/{document_id}/status", response_model=Document)
async def update_document_status(
    document_id: int,
    payload: StatusUpdateRequest,
    *,
    session: Session = Depends(get_session),
) -> Document:
    """Approve a document that is awaiting review."""

    try:
        return approve_document(session=session, document_id=document_id)
    except DocumentNotFoundError:
        raise _not_found() from None
    except DocumentStateError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc


@router.delete("/documents/{document_id}", response_model=DeleteResponse)
async def remove_document(
    document_id: int,
    *,
    session: Session = Depends(get_session),
    storage: FileStorage = Depends(get_storage),
) -> DeleteResponse:
    """Delete a document record together with its stored file."""

    try:
        delete_document(session=session, document_id=document_id, storage=storage)
    except DocumentNotFoundError:
        raise _not_found() from None
    return DeleteResponse(success=True)


__all__ = ["router", "get_document_pipeline", "get_storage"]
