"""ASGI middleware that records Prometheus metrics for every HTTP request."""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bragger.core.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

# Liveness probes and the scrape endpoint itself are not recorded.
_SKIP_PATHS = frozenset({"/health", "/api/health", "/metrics"})


def _normalise_path(path: str) -> str:
    """Collapse UUID path segments and stored image names to keep cardinality bounded.

    /api/achievements/550e8400-e29b-41d4-a716-446655440000  →  /api/achievements/{id}
    /api/images/3f2a...9c.png                               →  /api/images/{filename}
    """
    parts = path.rstrip("/").split("/")
    out: list[str] = []
    for i, part in enumerate(parts):
        stripped = part.replace("-", "")
        if len(stripped) == 32 and all(c in "0123456789abcdef" for c in stripped.lower()):
            out.append("{id}")
        elif i > 0 and parts[i - 1] == "images" and "." in part:
            out.append("{filename}")
        else:
            out.append(part)
    return "/".join(out) or "/"


def _endpoint_label(request: Request) -> str:
    """Prefer the matched route template, e.g. /api/achievements/{achievement_id}/milestones."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or _normalise_path(request.url.path)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Records request count, duration, and in-progress gauge."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        method = request.method

        if path in _SKIP_PATHS:
            return await call_next(request)

        http_requests_in_progress.labels(method=method).inc()
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status = str(response.status_code)
        except Exception:
            status = "500"
            raise
        finally:
            elapsed = time.perf_counter() - start
            endpoint = _endpoint_label(request)
            http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(elapsed)
            http_requests_in_progress.labels(method=method).dec()

        return response
