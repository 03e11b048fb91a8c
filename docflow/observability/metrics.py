"""In-process counters for HTTP traffic and upload pipeline outcomes."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock
from time import perf_counter
from typing import Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


@dataclass
class RouteTiming:
    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def add(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.max_ms = max(self.max_ms, duration_ms)

    def as_dict(self) -> Dict[str, float | int]:
        return {
            "count": self.count,
            "avg_duration_ms": self.total_ms / self.count if self.count else 0.0,
            "max_duration_ms": self.max_ms,
        }


@dataclass
class UploadTally:
    """Terminal statuses, failing stages, and bytes accepted by the upload pipeline."""

    outcomes: Counter[str] = field(default_factory=Counter)
    failed_stages: Counter[str] = field(default_factory=Counter)
    bytes_stored: int = 0


class MetricsRegistry:
    """Thread-safe collector shared by the middleware and the upload pipeline."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._in_flight = 0
            self._requests_total = 0
            self._status_families: Counter[str] = Counter()
            self._routes: Dict[str, RouteTiming] = {}
            self._uploads = UploadTally()

    def request_started(self) -> None:
        with self._lock:
            self._in_flight += 1

    def request_finished(
        self, method: str, route: str, status_code: int, duration_seconds: float
    ) -> None:
        key = f"{method.upper()} {route}"
        with self._lock:
            self._in_flight = max(0, self._in_flight - 1)
            self._requests_total += 1
            self._status_families[f"{status_code // 100}xx"] += 1
            self._routes.setdefault(key, RouteTiming()).add(
                max(duration_seconds * 1000.0, 0.0)
            )

    def upload_finished(
        self, status: str, *, stored_bytes: int = 0, failed_stage: str | None = None
    ) -> None:
        """Record the status an upload run ended in."""

        with self._lock:
            self._uploads.outcomes[status] += 1
            self._uploads.bytes_stored += stored_bytes
            if failed_stage:
                self._uploads.failed_stages[failed_stage] += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "requests_total": self._requests_total,
                "in_flight": self._in_flight,
                "status_codes": dict(self._status_families),
                "routes": {key: timing.as_dict() for key, timing in self._routes.items()},
                "uploads": {
                    "outcomes": dict(self._uploads.outcomes),
                    "failed_stages": dict(self._uploads.failed_stages),
                    "bytes_stored": self._uploads.bytes_stored,
                },
            }


def _route_template(request: Request) -> str:
    # Group /api/documents/7 and /api/documents/8 under one key.
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Time every request and file it under its route template."""

    def __init__(self, app: ASGIApp, *, registry: MetricsRegistry | None = None) -> None:
        super().__init__(app)
        self._registry = registry or metrics_registry

    async def dispatch(self, request: Request, call_next):
        start = perf_counter()
        self._registry.request_started()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            self._registry.request_finished(
                request.method, _route_template(request), status_code, perf_counter() - start
            )


metrics_registry = MetricsRegistry()

__all__ = [
    "MetricsRegistry",
    "RequestMetricsMiddleware",
    "metrics_registry",
]
