"""Liveness endpoint."""

from __future__ import annotations

import os

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from docflow import __version__
from ..config import Settings, get_settings


class HealthResponse(BaseModel):
    ok: bool
    version: str
    storage_writable: bool


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse, summary="Service health status")
def read_health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Report that the API is up and whether uploads can be written to disk."""

    upload_dir = settings.upload_dir
    writable = upload_dir.is_dir() and os.access(upload_dir, os.W_OK)
    return HealthResponse(ok=True, version=__version__, storage_writable=writable)


__all__ = ["router", "HealthResponse", "read_health"]
