"""Lightweight schema migration helpers for the Docflow backend."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError


MigrationFunc = Callable[[Engine], None]


def _add_column_if_missing(engine: Engine, table: str, column: str, ddl: str) -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        try:
            columns = inspector.get_columns(table)
        except NoSuchTableError:
            return

        if any(existing["name"] == column for existing in columns):
            return

        connection.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))


def _ensure_document_stored_path(engine: Engine) -> None:
    """Add ``stored_path`` to ``document``; early databases kept metadata only."""

    _add_column_if_missing(engine, "document", "stored_path", "VARCHAR")


def _ensure_document_extracted_data(engine: Engine) -> None:
    """Add the ``extracted_data`` JSON column to ``document`` if it is missing."""

    _add_column_if_missing(engine, "document", "extracted_data", "JSON")


def _ensure_document_error_message(engine: Engine) -> None:
    _add_column_if_missing(engine, "document", "error_message", "VARCHAR")


_MIGRATIONS: tuple[MigrationFunc, ...] = (
    _ensure_document_stored_path,
    _ensure_document_extracted_data,
    _ensure_document_error_message,
)


def run_migrations(engine: Engine, migrations: Iterable[MigrationFunc] | None = None) -> None:
    """Execute idempotent schema migrations for the provided engine."""

    for migration in migrations or _MIGRATIONS:
        migration(engine)
