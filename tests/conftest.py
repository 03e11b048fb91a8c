"""Test configuration for Docflow."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Generator

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from docflow.config import get_settings, reset_settings_cache  # noqa: E402
from docflow.database import init_db, reset_database_state, session_scope  # noqa: E402
from docflow.observability import metrics_registry  # noqa: E402
from docflow.services.structured_extraction import ExtractedData  # noqa: E402

INVOICE_DATA = {
    "documentType": "invoice",
    "vendor": "Acme",
    "amount": 500,
    "date": "2024-01-15",
    "description": "Jan invoice",
}


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Provide isolated configuration for each test."""

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test-key")
    monkeypatch.delenv("REQUIRE_REVIEW", raising=False)
    monkeypatch.delenv("PARSER_ENGINE", raising=False)
    monkeypatch.delenv("OPENROUTER_TIMEOUT_S", raising=False)
    reset_settings_cache()
    reset_database_state()
    metrics_registry.reset()
    yield
    reset_settings_cache()
    reset_database_state()
    metrics_registry.reset()


@pytest.fixture()
def upload_dir() -> Path:
    return get_settings().upload_dir


@pytest.fixture()
def session() -> Generator[Session, None, None]:
    """Return a session bound to a freshly initialised database."""

    init_db()
    with session_scope() as db_session:
        yield db_session


@pytest.fixture()
def fake_extraction(monkeypatch: pytest.MonkeyPatch) -> dict[str, list]:
    """Replace PDF parsing and the LLM call with canned results."""

    calls: dict[str, list] = {"text": [], "ai": []}

    def fake_extract_text(data: bytes) -> str:
        calls["text"].append(data)
        return "ACME invoice January 2024 total 500"

    def fake_extract_structured_data(text: str, **_kwargs) -> ExtractedData:
        calls["ai"].append(text)
        return ExtractedData.model_validate(INVOICE_DATA)

    monkeypatch.setattr("docflow.services.documents.extract_text", fake_extract_text)
    monkeypatch.setattr(
        "docflow.services.documents.extract_structured_data",
        fake_extract_structured_data,
    )
    return calls


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Return a test client for the FastAPI application."""

    from docflow.main import app

    with TestClient(app) as test_client:
        yield test_client
