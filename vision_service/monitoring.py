"""
Request metrics, request ids and the health payload.

Requests are labelled by the route template they matched, so the label set
stays bounded no matter what paths clients send.
"""
import time
import uuid
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Any, Union
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram, Gauge, generate_latest

HEALTHY_TEXT = "Service is healthy"
UNMATCHED_ROUTE = "unmatched"

request_id_var: ContextVar[str] = ContextVar('request_id', default='')

http_requests_total = Counter(
    'http_requests_total',
    'Requests handled by the service',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'Time spent handling a request',
    ['method', 'endpoint'],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Requests that failed with a server error or an unhandled exception',
    ['method', 'endpoint']
)

service_started_at = time.monotonic()
service_uptime_seconds = Gauge('service_uptime_seconds', 'Seconds since the process started')
service_uptime_seconds.set_function(lambda: time.monotonic() - service_started_at)

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get('')


def route_label(request: Request) -> str:
    """Path template of the route the router matched, if any."""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and records its count, latency and failures."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = uuid.uuid4().hex[:8]
        request_id_var.set(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            endpoint = route_label(request)
            http_errors_total.labels(method=request.method, endpoint=endpoint).inc()
            logger.error(f"{request.method} {endpoint} raised", exc_info=True)
            raise

        elapsed = time.perf_counter() - started
        endpoint = route_label(request)
        http_requests_total.labels(
            method=request.method, endpoint=endpoint, status_code=response.status_code
        ).inc()
        http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(elapsed)

        if response.status_code >= 500:
            http_errors_total.labels(method=request.method, endpoint=endpoint).inc()
            logger.error(f"{request.method} {endpoint} -> {response.status_code}")
        else:
            logger.debug(f"{request.method} {endpoint} -> {response.status_code} in {elapsed:.4f}s")

        response.headers["X-Request-ID"] = request_id
        return response


def get_metrics() -> str:
    """Get Prometheus metrics in text format."""
    return generate_latest().decode('utf-8')


def get_health_info(health_format: str = "json") -> Union[str, Dict[str, Any]]:
    """Build the /health body: plain text, or a status object with an RFC 3339 timestamp."""
    if health_format == "text":
        return HEALTHY_TEXT
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
    }
