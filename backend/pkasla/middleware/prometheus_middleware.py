"""
Prometheus metrics middleware for HTTP request tracking.

Tracks duration, status codes and in-progress requests per normalized
endpoint.
"""

import re
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics

# ULIDs and long opaque tokens collapse to one label value
_ID_SEGMENT = re.compile(r"^([0-9A-HJKMNP-TV-Z]{26}|\d+|[A-Za-z0-9_-]{32,})$")


def normalize_path(raw_path: str) -> str:
    """Replace id-like path segments with ``:id`` to bound label cardinality."""
    return "/".join(":id" if _ID_SEGMENT.match(segment) else segment for segment in raw_path.split("/"))


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path == "/metrics/prometheus":
            return await call_next(request)

        method = request.method
        path = normalize_path(request.url.path)

        prometheus_metrics.track_http_request_start(method, path)
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time
            prometheus_metrics.record_http_request(
                method=method, endpoint=path, duration=duration, status_code=response.status_code
            )
            return response
        finally:
            prometheus_metrics.track_http_request_end(method, path)
