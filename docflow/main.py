"""Docflow ASGI application."""

from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from . import __version__
from .config import FRONTEND_DIR, Settings, get_settings
from .database import init_db
from .middleware import (
    REQUEST_ID_HEADER,
    RequestIdMiddleware,
    SecurityHeadersMiddleware,
)
from .observability import RequestMetricsMiddleware
from .routers import api_router
from .utils.logging import configure_logging

logger = logging.getLogger("uvicorn.error")

# Dev server of the review frontend.
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")


@dataclass(frozen=True)
class CorsPolicy:
    origins: tuple[str, ...]
    origin_regex: str | None
    allow_credentials: bool

    @classmethod
    def from_settings(cls, settings: Settings) -> "CorsPolicy":
        origins = tuple(settings.cors_allow_origins) or DEFAULT_CORS_ORIGINS
        if "*" in origins:
            # Browsers reject credentials with a wildcard origin.
            return cls(("*",), settings.cors_allow_origin_regex, False)
        return cls(origins, settings.cors_allow_origin_regex, True)

    def allowed_origin(self, origin: str | None) -> str | None:
        """Return the value for ``Access-Control-Allow-Origin``, if ``origin`` may read."""

        if not origin:
            return None
        if self.origins == ("*",):
            return "*"
        if origin in self.origins:
            return origin
        if self.origin_regex and re.fullmatch(self.origin_regex, origin):
            return origin
        return None

    def error_headers(self, origin: str | None) -> dict[str, str]:
        """CORS headers for responses produced outside ``CORSMiddleware``."""

        allowed = self.allowed_origin(origin)
        if allowed is None:
            return {}
        headers = {"Access-Control-Allow-Origin": allowed, "Vary": "Origin"}
        if self.allow_credentials and allowed != "*":
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers


def _mask_api_key(value: str | None) -> str:
    """Return a masked representation of the OpenRouter API key."""

    stripped = (value or "").strip()
    if not stripped:
        return "<missing>"
    if len(stripped) <= 8:
        middle = "…" * max(len(stripped) - 2, 1)
        return f"{stripped[0]}{middle}{stripped[-1]}"
    return f"{stripped[:4]}…{stripped[-4:]}"


def _announce_openrouter_api_key(value: str | None) -> None:
    if value and value.strip():
        logger.info(
            "[Docflow] OpenRouter API key loaded from environment: %s",
            _mask_api_key(value),
        )
    else:
        logger.warning(
            "[Docflow] Warning: OPENROUTER_API_KEY is not set; "
            "PDF uploads will fail at the structured extraction step."
        )


def _mount_frontend(app: FastAPI) -> None:
    """Serve a built review frontend from ``frontend/`` when one is present."""

    if not FRONTEND_DIR.exists():
        return
    dist_dir = FRONTEND_DIR / "dist"
    static_root = dist_dir if dist_dir.exists() else FRONTEND_DIR
    assets_dir = static_root / "assets"
    if assets_dir.exists():
        app.mount(
            "/assets",
            StaticFiles(directory=str(assets_dir), html=False),
            name="frontend-assets",
        )

    @app.get("/", include_in_schema=False)
    async def serve_frontend() -> FileResponse:
        return FileResponse(static_root / "index.html")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise logging, database tables, and the upload root."""

    current = get_settings()
    configure_logging(current.log_level)
    init_db()
    current.upload_dir.mkdir(parents=True, exist_ok=True)
    yield


settings = get_settings()
cors_policy = CorsPolicy.from_settings(settings)
_announce_openrouter_api_key(settings.openrouter_api_key)

app = FastAPI(title="Docflow", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cors_policy.origins),
    allow_credentials=cors_policy.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_origin_regex=cors_policy.origin_regex,
    expose_headers=["Content-Range", "Accept-Ranges", REQUEST_ID_HEADER],
)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(RequestMetricsMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

app.include_router(api_router)


@app.exception_handler(Exception)
async def handle_unexpected_exception(
    request: Request, exc: Exception
) -> JSONResponse:
    """Return a JSON 500 that the browser is still allowed to read."""

    logger.exception(
        "Unhandled exception while processing %s %s", request.method, request.url.path
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"},
        headers=cors_policy.error_headers(request.headers.get("origin")) or None,
    )


_mount_frontend(app)


__all__ = ["app", "CorsPolicy", "FRONTEND_DIR"]
