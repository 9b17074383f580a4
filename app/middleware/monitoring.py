"""Monitoring and observability middleware"""
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from app.utils.logger import logger

SLOW_REQUEST_SECONDS = 1.0


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "glint_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "glint_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Error metrics
http_errors_total = Counter(
    "glint_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)

# Security metrics
auth_failures_total = Counter(
    "glint_auth_failures_total",
    "Total authentication and authorization failures",
    ["reason"]  # invalid_credentials, unauthenticated, admin_missing, forbidden, csrf
)

# Cache metrics
cache_requests_total = Counter(
    "glint_cache_requests_total",
    "Cache lookups by outcome",
    ["result"]  # hit, miss
)

audit_write_failures_total = Counter(
    "glint_audit_write_failures_total",
    "Audit entries that could not be persisted"
)


def _endpoint_label(request: Request) -> str:
    """Route template when matched, so ids don't explode label cardinality"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()
        method = request.method

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id") or f"req_{uuid.uuid4().hex[:16]}"
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            endpoint = _endpoint_label(request)
            http_errors_total.labels(method=method, endpoint=endpoint, status=500).inc()
            logger.error(
                f"Request failed: {method} {endpoint}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": request.url.path,
                    "duration": duration,
                    "error": str(e),
                },
                exc_info=True
            )
            raise

        status = response.status_code
        duration = time.time() - start_time
        endpoint = _endpoint_label(request)

        http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"Slow request detected: {method} {endpoint}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": request.url.path,
                    "duration": duration,
                    "status_code": status,
                }
            )

        if status >= 400:
            http_errors_total.labels(method=method, endpoint=endpoint, status=status).inc()

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def record_auth_failure(reason: str):
    """Record authentication or authorization failure"""
    auth_failures_total.labels(reason=reason).inc()


def record_cache_result(result: str):
    """Record cache hit or miss"""
    cache_requests_total.labels(result=result).inc()


def record_audit_failure():
    """Record an audit entry that failed to persist"""
    audit_write_failures_total.inc()
