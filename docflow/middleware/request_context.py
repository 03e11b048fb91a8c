"""Per-request identifiers shared by the middleware stack, routes, and log records."""

from __future__ import annotations

import re
import secrets
from contextvars import ContextVar

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"

_current_request_id: ContextVar[str | None] = ContextVar(
    "docflow_request_id", default=None
)
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def new_request_id() -> str:
    return secrets.token_hex(16)


def accept_request_id(raw: str | None) -> str:
    """Reuse a client-supplied id only when it is safe to echo into headers and logs."""

    candidate = (raw or "").strip()
    if _SAFE_REQUEST_ID.fullmatch(candidate):
        return candidate
    return new_request_id()


def get_request_id(default: str | None = None) -> str | None:
    """Return the id of the request being served, or ``default`` outside a request."""

    return _current_request_id.get() or default


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id, expose it to handlers, and echo it back."""

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        request_id = accept_request_id(request.headers.get(self.header_name))
        request.state.request_id = request_id
        token = _current_request_id.set(request_id)
        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)
        response.headers[self.header_name] = request_id
        return response


__all__ = [
    "REQUEST_ID_HEADER",
    "RequestIdMiddleware",
    "accept_request_id",
    "get_request_id",
    "new_request_id",
]
