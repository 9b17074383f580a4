"""FastAPI application entry point"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded

from app.api import (
    admin_users,
    applications,
    audit,
    auth,
    driver_applications,
    health,
    oil_change,
    requests,
    trucks,
)
from app.config import settings
from app.database import SessionLocal
from app.middleware import CSRFMiddleware, MonitoringMiddleware, limiter
from app.services.errors import ServiceError
from app.utils.crypto import ConfigurationError
from app.utils.auth import prune_refresh_tokens
from app.utils.cache import CacheGate
from app.utils.jwt_utils import load_signing_key
from app.utils.logger import logger, setup_logging

VERSION = "1.0.0"

setup_logging(settings.LOG_LEVEL)


def _prune_expired_sessions() -> None:
    db = SessionLocal()
    try:
        prune_refresh_tokens(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Refuse to start without a usable signing secret
    load_signing_key()

    app.state.cache.connect()
    _prune_expired_sessions()

    logger.info("Glint admin backend starting up", extra={
        "version": VERSION,
        "environment": settings.ENVIRONMENT,
        "log_level": settings.LOG_LEVEL,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED,
    })
    yield
    app.state.cache.close()
    logger.info("Glint admin backend shutting down")


app = FastAPI(
    title="Glint Admin",
    description="Admin backend for driver applications, fleet maintenance and customer requests",
    version=VERSION,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=lifespan,
)

app.state.cache = CacheGate(
    settings.REDIS_URL,
    default_ttl=settings.CACHE_DEFAULT_TTL,
    max_failures=settings.CACHE_MAX_FAILURES,
    reconnect_interval=settings.CACHE_RECONNECT_INTERVAL,
    log_interval=settings.CACHE_LOG_INTERVAL,
    socket_timeout=settings.CACHE_SOCKET_TIMEOUT,
)

# ===== Middleware Setup =====
# Request order: CORS -> CSRF -> monitoring -> routes (last added runs first)

if settings.METRICS_ENABLED:
    app.add_middleware(MonitoringMiddleware)

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/health/live"],
        inprogress_name="glint_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# Origin check on state-changing requests
app.add_middleware(
    CSRFMiddleware,
    allowed_origins=settings.allowed_origins_list,
    exempt_paths=settings.csrf_exempt_paths_list,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Rate limiting
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning(
        "Rate limit exceeded",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later."},
    )


# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admin_users.router)
app.include_router(applications.router)
app.include_router(driver_applications.router)
app.include_router(trucks.router)
app.include_router(oil_change.router)
app.include_router(requests.public_router)
app.include_router(requests.admin_router)
app.include_router(audit.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "glint-admin",
        "version": VERSION,
        "status": "operational",
        "health": "/health",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None,
    }


# ===== Error Handlers =====

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Map expected service failures to their status code"""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """A secret needed for this request is missing or malformed"""
    logger.error(
        f"Configuration error: {exc}",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {exc}",
        extra={"path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
