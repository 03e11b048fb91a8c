"""Todo list persistence helpers."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlmodel import Session, select

from ..models import Todo


class TodoNotFoundError(LookupError):
    """Raised when no todo exists for an id."""

    def __init__(self, todo_id: int) -> None:
        super().__init__(f"Todo {todo_id} not found")
        self.todo_id = todo_id


def list_todos(*, session: Session) -> list[Todo]:
    return list(session.exec(select(Todo).order_by(Todo.id)))


def get_todo(*, session: Session, todo_id: int) -> Todo:
    todo = session.get(Todo, todo_id)
    if todo is None:
        raise TodoNotFoundError(todo_id)
    return todo


def create_todo(
    *, session: Session, title: str, description: str | None = None
) -> Todo:
    todo = Todo(title=title, description=description)
    session.add(todo)
    session.commit()
    session.refresh(todo)
    return todo


def update_todo(
    *,
    session: Session,
    todo_id: int,
    title: str | None = None,
    description: str | None = None,
    completed: bool | None = None,
) -> Todo:
    """Apply the provided fields; ``None`` leaves a field unchanged."""

    todo = get_todo(session=session, todo_id=todo_id)
    if title is not None:
        todo.title = title
    if description is not None:
        todo.description = description
    if completed is not None:
        todo.completed = completed
    todo.updated_at = datetime.now(UTC)
    session.add(todo)
    session.commit()
    session.refresh(todo)
    return todo


def delete_todo(*, session: Session, todo_id: int) -> None:
    todo = get_todo(session=session, todo_id=todo_id)
    session.delete(todo)
    session.commit()


__all__ = [
    "TodoNotFoundError",
    "create_todo",
    "delete_todo",
    "get_todo",
    "list_todos",
    "update_todo",
]
