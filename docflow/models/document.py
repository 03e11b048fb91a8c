"""Document model definition."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Optional

from sqlalchemy import JSON, Column, Enum as SAEnum
from sqlmodel import Field, SQLModel

from ..validation import MAX_FILENAME_LENGTH, PDF_MIME_TYPE, DocumentStatus


class Document(SQLModel, table=True):
    """Represents an uploaded document and its processing state."""

    id: Optional[int] = Field(default=None, primary_key=True)
    filename: str = Field(
        max_length=MAX_FILENAME_LENGTH,
        index=True,
        description="Original client-supplied filename (not path safe).",
    )
    file_size: int = Field(description="Declared size of the upload in bytes.")
    mime_type: str = Field(description="Declared MIME type of the upload.")
    uploaded_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="UTC timestamp indicating when the upload started.",
    )
    status: DocumentStatus = Field(
        default=DocumentStatus.UPLOADING,
        sa_column=Column(
            SAEnum(
                DocumentStatus,
                values_callable=lambda enum: [member.value for member in enum],
                native_enum=False,
                length=32,
            ),
            nullable=False,
            index=True,
        ),
        description="Current lifecycle state.",
    )
    stored_path: str | None = Field(
        default=None,
        description="Path of the stored bytes relative to the upload root.",
    )
    extracted_data: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Structured fields extracted from PDF text.",
    )
    error_message: str | None = Field(
        default=None, description="Message of the most recent pipeline failure."
    )

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE
