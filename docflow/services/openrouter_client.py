"""Synchronous OpenRouter chat client used for structured extraction."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import DEFAULT_OPENROUTER_MODEL, DEFAULT_OPENROUTER_URL

log = logging.getLogger("openrouter")


class OpenRouterError(RuntimeError):
    """Raised when the OpenRouter API request fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _build_headers(
    api_key: str | None, site_url: str | None, title: str | None
) -> Dict[str, str]:
    if not api_key or not api_key.strip():
        raise OpenRouterError("Missing OPENROUTER_API_KEY")

    headers: Dict[str, str] = {
        "Authorization": f"Bearer {api_key.strip()}",
        "Content-Type": "application/json",
    }
    # Optional attribution headers used by OpenRouter analytics.
    if site_url and site_url.strip():
        headers["HTTP-Referer"] = site_url.strip()
    if title and title.strip():
        headers["X-Title"] = title.strip()
    return headers


def chat(
    messages: List[Dict[str, str]],
    *,
    api_key: str | None,
    model: Optional[str] = None,
    url: Optional[str] = None,
    site_url: str | None = None,
    title: str | None = None,
    timeout: float | None = None,
) -> str:
    """Send one chat completion request to OpenRouter and return the content.

    The request is issued exactly once. ``timeout`` defaults to ``None`` which
    leaves the wait unbounded.
    """

    endpoint = (url or DEFAULT_OPENROUTER_URL).strip()
    if not endpoint.startswith("http"):
        raise OpenRouterError(f"Invalid OPENROUTER_URL: {endpoint!r}")

    request_headers = _build_headers(api_key, site_url, title)
    payload: Dict[str, Any] = {
        "model": model or DEFAULT_OPENROUTER_MODEL,
        "messages": messages,
    }

    safe_headers = dict(request_headers)
    safe_headers["Authorization"] = "***REDACTED***"
    log.debug(
        "OpenRouter request prepared",
        extra={"openrouter": {"url": endpoint, "headers": safe_headers, "model": payload["model"]}},
    )

    try:
        response = requests.post(
            endpoint,
            headers=request_headers,
            json=payload,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        log.error("OpenRouter request failed: %s", exc)
        raise OpenRouterError(f"OpenRouter request failed: {exc}") from exc

    if not 200 <= response.status_code < 300:
        snippet = response.text[:500]
        log.error("OpenRouter error %s: %s", response.status_code, snippet)
        raise OpenRouterError(
            f"OpenRouter API request failed: {response.status_code} {response.reason}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        log.error("OpenRouter invalid JSON: %s", response.text[:500])
        raise OpenRouterError("Invalid JSON from OpenRouter") from exc

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        log.error("OpenRouter bad shape: %s / %s", exc, data)
        raise OpenRouterError("No content in OpenRouter response") from exc

    if not content:
        raise OpenRouterError("No content in OpenRouter response")

    log.info("OpenRouter response (first 200 chars): %s", content[:200])
    return content


__all__ = ["chat", "OpenRouterError"]
