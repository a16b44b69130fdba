"""
Prometheus metrics middleware for HTTP request tracking.
"""

import re
import time
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics

_UUID_SEGMENT = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
METRICS_PATH = "/metrics"


def normalize_path(raw_path: str) -> str:
    """Collapse ids to ``:id`` to keep label cardinality bounded."""
    return "/".join(
        ":id" if segment.isdigit() or _UUID_SEGMENT.match(segment) else segment
        for segment in raw_path.split("/")
    )


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        # Skip the scrape endpoint itself
        if request.url.path == METRICS_PATH:
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        prometheus_metrics.record_http_request(
            method=request.method,
            endpoint=normalize_path(request.url.path),
            duration=time.time() - start_time,
            status_code=response.status_code,
        )
        return response
