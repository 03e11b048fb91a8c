"""Engine and session management for the Docflow database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, SQLModel, create_engine

from . import config as config_module
from .config import PROJECT_ROOT
from .migrations import run_migrations

LOGGER = logging.getLogger(__name__)

_engine: Engine | None = None


def _engine_arguments(database_url: str) -> tuple[str, dict[str, Any]]:
    """Return the URL to connect to and the driver ``connect_args`` for it."""

    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return database_url, {}

    database = url.database
    if database and database != ":memory:":
        db_path = Path(database)
        if not db_path.is_absolute():
            db_path = (PROJECT_ROOT / db_path).resolve()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        url = url.set(database=str(db_path))

    # Uploads run the pipeline on a worker thread with the request's session.
    return url.render_as_string(hide_password=False), {"check_same_thread": False}


def get_engine() -> Engine:
    """Return the process-wide engine, creating it from settings on first use."""

    global _engine
    if _engine is None:
        database_url, connect_args = _engine_arguments(
            config_module.get_settings().database_url
        )
        _engine = create_engine(database_url, connect_args=connect_args)
    return _engine


@contextmanager
def session_scope() -> Iterator[Session]:
    with Session(get_engine()) as session:
        yield session


def get_session() -> Iterator[Session]:
    """FastAPI dependency yielding one session per request."""

    with session_scope() as session:
        yield session


def init_db() -> Engine:
    """Create missing tables and backfill columns added after the first release."""

    from .models import document, todo  # noqa: F401  registers the tables

    engine = get_engine()
    SQLModel.metadata.create_all(engine)
    run_migrations(engine)
    LOGGER.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    return engine


def reset_database_state() -> None:
    """Dispose of the cached engine so the next call rebuilds it from settings."""

    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None


__all__ = [
    "get_engine",
    "get_session",
    "init_db",
    "reset_database_state",
    "session_scope",
]
