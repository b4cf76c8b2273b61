from __future__ import annotations

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from catalog.core.metrics import http_request_duration_seconds, http_requests_total


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started_at = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - started_at
        # Label by route template, never the raw path with ids in it.
        route = request.scope.get("route")
        route_path = getattr(route, "path", None) or "unmatched"
        http_requests_total.labels(method=request.method, path=route_path, status=str(response.status_code)).inc()
        http_request_duration_seconds.labels(method=request.method, path=route_path).observe(duration)
        return response
