"""Rate limiting for login and public intake endpoints"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings


# Only unauthenticated routes are limited, so callers are keyed by address
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)


# Rate limit configurations for different endpoints
RATE_LIMITS = {
    "login": settings.LOGIN_RATE_LIMIT,
    "public_form": settings.PUBLIC_FORM_RATE_LIMIT,
}


def get_rate_limit(endpoint: str) -> str:
    """Get rate limit for specific endpoint"""
    return RATE_LIMITS.get(endpoint, settings.RATE_LIMIT_DEFAULT[0])
