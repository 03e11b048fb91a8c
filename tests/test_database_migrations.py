"""Tests covering automatic database migrations."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from docflow import database
from docflow.config import reset_settings_cache


def _create_legacy_document_table(path: Path) -> None:
    """Create a ``document`` table from before files were kept on disk."""

    with sqlite3.connect(path) as connection:
        connection.execute(
            """
            CREATE TABLE document (
                id INTEGER PRIMARY KEY,
                filename VARCHAR NOT NULL,
                file_size INTEGER NOT NULL,
                mime_type VARCHAR NOT NULL,
                uploaded_at DATETIME NOT NULL,
                status VARCHAR(32) NOT NULL
            )
            """
        )
        connection.execute(
            "INSERT INTO document (filename, file_size, mime_type, uploaded_at, status) "
            "VALUES ('old.txt', 3, 'text/plain', '2024-01-01 00:00:00', 'uploaded')"
        )


def _columns(path: Path, table: str) -> set[str]:
    with sqlite3.connect(path) as connection:
        return {row[1] for row in connection.execute(f"PRAGMA table_info({table})")}


def test_init_db_backfills_document_columns(tmp_path, monkeypatch):
    db_path = tmp_path / "legacy.db"
    _create_legacy_document_table(db_path)

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    database.reset_database_state()
    reset_settings_cache()

    database.init_db()

    columns = _columns(db_path, "document")
    assert {"stored_path", "extracted_data", "error_message"} <= columns
    assert "todo" in {
        row[0]
        for row in sqlite3.connect(db_path).execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        )
    }


def test_init_db_is_idempotent(tmp_path, monkeypatch):
    db_path = tmp_path / "fresh.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    database.reset_database_state()
    reset_settings_cache()

    database.init_db()
    database.init_db()

    assert "stored_path" in _columns(db_path, "document")
