"""Configuration utilities for the Docflow backend."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[1]
FRONTEND_DIR = PROJECT_ROOT / "frontend"
DEFAULT_UPLOAD_DIR = PROJECT_ROOT / "uploads"

DEFAULT_OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_OPENROUTER_MODEL = "anthropic/claude-3.5-sonnet"
PARSER_ENGINES = ("auto", "fitz", "pdfium")


def _env_flag(name: str, default: bool) -> bool:
    """Return a boolean flag derived from environment variables."""

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_optional_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return int(raw)


def _load_environment() -> None:
    """Load environment variables from a ``.env`` file if present."""

    explicit_path = os.getenv("DOCFLOW_ENV_FILE")
    candidates = []

    if explicit_path:
        candidates.append(Path(explicit_path))

    candidates.append(PROJECT_ROOT / ".env")

    for candidate in candidates:
        try_path = candidate.expanduser()
        if try_path.exists():
            load_dotenv(try_path, override=False)


_load_environment()


def _database_url_default() -> str:
    """Return the configured database URL using legacy fallbacks."""

    return os.getenv("DATABASE_URL") or os.getenv("DB_URL") or "sqlite:///./docflow.db"


def _upload_dir_default() -> Path:
    # UPLOADS_DIR is the name the first release of the app used.
    raw = os.getenv("UPLOAD_DIR") or os.getenv("UPLOADS_DIR")
    return Path(raw) if raw else DEFAULT_UPLOAD_DIR


def _cors_origins_default() -> Tuple[str, ...]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "")
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


def _cors_origin_regex_default() -> str | None:
    """Return the default CORS origin regex allowing local development hosts."""

    raw = os.getenv(
        "CORS_ALLOW_ORIGIN_REGEX",
        r"http://(?:localhost|127\.0\.0\.1|0\.0\.0\.0)(?::\d{1,5})?",
    )
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


class Settings(BaseModel):
    """Application configuration loaded from environment variables."""

    # Values come from default factories, which pydantic skips unless asked.
    model_config = ConfigDict(validate_default=True)

    database_url: str = Field(default_factory=_database_url_default)
    upload_dir: Path = Field(default_factory=_upload_dir_default)
    cors_allow_origins: Tuple[str, ...] = Field(default_factory=_cors_origins_default)
    cors_allow_origin_regex: str | None = Field(default_factory=_cors_origin_regex_default)
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "3001")))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "info"))
    parser_engine: str = Field(
        default_factory=lambda: os.getenv("PARSER_ENGINE", "auto")
    )
    require_review: bool = Field(
        default_factory=lambda: _env_flag("REQUIRE_REVIEW", True)
    )
    openrouter_api_key: str | None = Field(
        default_factory=lambda: os.getenv("OPENROUTER_API_KEY")
    )
    openrouter_url: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_URL", DEFAULT_OPENROUTER_URL)
    )
    openrouter_model: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_MODEL", DEFAULT_OPENROUTER_MODEL)
    )
    openrouter_http_referer: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_SITE_URL")
        or os.getenv("HTTP_REFERER")
        or "http://localhost:3001"
    )
    openrouter_title: str = Field(
        default_factory=lambda: os.getenv("OPENROUTER_X_TITLE")
        or os.getenv("X_TITLE")
        or "PDF Document Parser"
    )
    openrouter_timeout_s: int | None = Field(
        default_factory=lambda: _env_optional_int("OPENROUTER_TIMEOUT_S")
    )

    @field_validator("upload_dir", mode="after")
    @classmethod
    def _ensure_upload_dir(cls, value: Path) -> Path:
        if not value.is_absolute():
            value = (PROJECT_ROOT / value).resolve()
        value.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("openrouter_api_key", mode="after")
    @classmethod
    def _blank_key_is_missing(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("parser_engine", mode="after")
    @classmethod
    def _normalise_parser_engine(cls, value: str) -> str:
        value = (value or "auto").strip().lower()
        return value if value in PARSER_ENGINES else "auto"

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return (value or "info").strip().lower()

    @field_validator("openrouter_timeout_s", mode="after")
    @classmethod
    def _positive_timeout(cls, value: int | None) -> int | None:
        if value is None or value <= 0:
            return None
        return value


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached settings so that subsequent calls reload from the environment."""

    get_settings.cache_clear()
