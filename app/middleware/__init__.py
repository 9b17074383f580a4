"""Middleware modules for production-ready features"""
from app.middleware.csrf import CSRFMiddleware
from app.middleware.monitoring import (
    MonitoringMiddleware,
    record_audit_failure,
    record_auth_failure,
    record_cache_result,
)
from app.middleware.rate_limit import get_rate_limit, limiter

__all__ = [
    "CSRFMiddleware",
    "MonitoringMiddleware",
    "record_audit_failure",
    "record_auth_failure",
    "record_cache_result",
    "limiter",
    "get_rate_limit"
]
