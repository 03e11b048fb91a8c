"""Routes that expose operational observability data."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from docflow import __version__
from ..config import get_settings
from ..database import session_scope
from ..models import Document
from ..observability import metrics_registry

router = APIRouter(prefix="/api", tags=["observability"])


def _document_counts() -> dict[str, object]:
    """Return document counts per status, or ``ok: False`` if the database is unreachable."""

    try:
        with session_scope() as session:
            rows = session.exec(
                select(Document.status, func.count()).group_by(Document.status)
            ).all()
    except SQLAlchemyError:
        return {"ok": False, "documents": {}}
    return {
        "ok": True,
        "documents": {getattr(state, "value", state): count for state, count in rows},
    }


@router.get("/metrics")
def read_metrics() -> dict[str, object]:
    """Return the current request metrics snapshot."""

    return metrics_registry.snapshot()


@router.get("/status")
def read_status() -> dict[str, object]:
    """Return an aggregated operational status payload."""

    settings = get_settings()
    return {
        "app": {"version": __version__},
        "database": _document_counts(),
        "extraction": {
            "configured": bool(settings.openrouter_api_key),
            "model": settings.openrouter_model,
            "require_review": settings.require_review,
        },
        "metrics": metrics_registry.snapshot(),
    }


__all__ = ["router"]
