"""Todo list CRUD endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from ..database import get_session
from ..models import Todo
from ..services.todos import (
    TodoNotFoundError,
    create_todo,
    delete_todo,
    get_todo,
    list_todos,
    update_todo,
)

router = APIRouter(prefix="/api", tags=["todos"])


class TodoCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None


class TodoUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    completed: bool | None = None


class TodoDeleteResponse(BaseModel):
    success: bool


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")


@router.get("/todos", response_model=list[Todo])
def read_todos(*, session: Session = Depends(get_session)) -> list[Todo]:
    return list_todos(session=session)


@router.post("/todos", response_model=Todo, status_code=status.HTTP_201_CREATED)
def add_todo(
    payload: TodoCreateRequest, *, session: Session = Depends(get_session)
) -> Todo:
    return create_todo(
        session=session, title=payload.title, description=payload.description
    )


@router.get("/todos/{todo_id}", response_model=Todo)
def read_todo(todo_id: int, *, session: Session = Depends(get_session)) -> Todo:
    try:
        return get_todo(session=session, todo_id=todo_id)
    except TodoNotFoundError:
        raise _not_found() from None


@router.patch("/todos/{todo_id}", response_model=Todo)
def edit_todo(
    todo_id: int,
    payload: TodoUpdateRequest,
    *,
    session: Session = Depends(get_session),
) -> Todo:
    """Update only the fields present in the payload."""

    try:
        return update_todo(
            session=session,
            todo_id=todo_id,
            title=payload.title,
            description=payload.description,
            completed=payload.completed,
        )
    except TodoNotFoundError:
        raise _not_found() from None


@router.delete("/todos/{todo_id}", response_model=TodoDeleteResponse)
def remove_todo(
    todo_id: int, *, session: Session = Depends(get_session)
) -> TodoDeleteResponse:
    try:
        delete_todo(session=session, todo_id=todo_id)
    except TodoNotFoundError:
        raise _not_found() from None
    return TodoDeleteResponse(success=True)


__all__ = ["router"]
