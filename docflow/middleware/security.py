"""Security headers added to every response."""

from __future__ import annotations

import re
from typing import Mapping

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

BASELINE_HEADERS: Mapping[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), fullscreen=()",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
}

NO_FRAMING: Mapping[str, str] = {
    "X-Frame-Options": "DENY",
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'none'; form-action 'self'",
}

SAME_ORIGIN_FRAMING: Mapping[str, str] = {
    "X-Frame-Options": "SAMEORIGIN",
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'self'",
}

# The review page shows stored PDFs in an embedded viewer.
EMBEDDABLE_PATH = re.compile(r"^/api/documents/\d+/file$")


def framing_headers(path: str, embeddable: re.Pattern[str] = EMBEDDABLE_PATH) -> Mapping[str, str]:
    return SAME_ORIGIN_FRAMING if embeddable.match(path) else NO_FRAMING


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Apply baseline headers plus the framing policy for the requested path.

    Headers already set by a route are left untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        embeddable_path: re.Pattern[str] = EMBEDDABLE_PATH,
    ) -> None:
        super().__init__(app)
        self._embeddable_path = embeddable_path

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        policy = framing_headers(request.url.path, self._embeddable_path)
        for name, value in {**BASELINE_HEADERS, **policy}.items():
            response.headers.setdefault(name, value)
        return response


__all__ = [
    "EMBEDDABLE_PATH",
    "SecurityHeadersMiddleware",
    "framing_headers",
]
