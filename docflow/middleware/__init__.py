"""ASGI middleware utilities for the Docflow backend."""

from .request_context import REQUEST_ID_HEADER, RequestIdMiddleware, get_request_id
from .security import SecurityHeadersMiddleware

__all__ = [
    "REQUEST_ID_HEADER",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "get_request_id",
]
