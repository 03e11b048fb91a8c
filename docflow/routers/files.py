"""Stored file download endpoint with byte-range support for PDF viewers."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from fastapi.responses import StreamingResponse
from sqlmodel import Session

from ..database import get_session
from ..models import Document
from ..services.file_storage import FileStorage
from .documents import get_storage

router = APIRouter(prefix="/api", tags=["files"])

CHUNK_SIZE = 64 * 1024
_RANGE_PATTERN = re.compile(r"^bytes=(\d*)-(\d*)$")


class RangeNotSatisfiable(ValueError):
    """Raised for a well-formed range that lies outside the file."""


def parse_range(header: str | None, size: int) -> tuple[int, int] | None:
    """Return the inclusive ``(start, end)`` selected by a ``Range`` header.

    ``None`` means the header is absent, malformed, or asks for several ranges,
    in which case the whole file is served.
    """

    if not header:
        return None
    match = _RANGE_PATTERN.match(header.strip())
    if match is None:
        return None

    raw_start, raw_end = match.groups()
    if not raw_start and not raw_end:
        return None

    if not raw_start:
        suffix = int(raw_end)
        if suffix == 0 or size == 0:
            raise RangeNotSatisfiable(header)
        return max(size - suffix, 0), size - 1

    start = int(raw_start)
    end = int(raw_end) if raw_end else size - 1
    if start >= size or end < start:
        raise RangeNotSatisfiable(header)
    return start, min(end, size - 1)


def _iter_file(path: Path, start: int, length: int) -> Iterator[bytes]:
    with path.open("rb") as handle:
        handle.seek(start)
        remaining = length
        while remaining > 0:
            chunk = handle.read(min(CHUNK_SIZE, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


@router.get("/documents/{document_id}/file")
def download_document_file(
    document_id: int,
    *,
    range_header: str | None = Header(default=None, alias="Range"),
    session: Session = Depends(get_session),
    storage: FileStorage = Depends(get_storage),
) -> Response:
    """Stream the stored bytes of a document, honouring single byte ranges."""

    document = session.get(Document, document_id)
    if document is None or not document.stored_path:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Document not found"
        )
    if not storage.exists(document.stored_path):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="File not found on disk"
        )

    path = storage.resolve(document.stored_path)
    size = path.stat().st_size
    headers = {"Accept-Ranges": "bytes"}

    try:
        selected = parse_range(range_header, size)
    except RangeNotSatisfiable:
        return Response(
            status_code=416,
            headers={**headers, "Content-Range": f"bytes */{size}"},
        )

    if selected is None:
        headers["Content-Length"] = str(size)
        return StreamingResponse(
            _iter_file(path, 0, size),
            media_type=document.mime_type,
            headers=headers,
        )

    start, end = selected
    length = end - start + 1
    headers["Content-Range"] = f"bytes {start}-{end}/{size}"
    headers["Content-Length"] = str(length)
    return StreamingResponse(
        _iter_file(path, start, length),
        status_code=status.HTTP_206_PARTIAL_CONTENT,
        media_type=document.mime_type,
        headers=headers,
    )


__all__ = ["router", "parse_range", "RangeNotSatisfiable"]
