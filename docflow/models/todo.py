"""Todo item model definition."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return the current time in UTC."""

    return datetime.now(UTC)


class Todo(SQLModel, table=True):
    """A single entry of the todo list."""

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(min_length=1, nullable=False)
    description: str | None = Field(default=None, nullable=True)
    completed: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)


__all__ = ["Todo"]
