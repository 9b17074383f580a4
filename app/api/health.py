"""Health check endpoints"""
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db

router = APIRouter(prefix="/health", tags=["health"])

STARTUP_TIME = time.time()
SLOW_DATABASE_MS = 1000


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health_check(request: Request) -> Dict[str, Any]:
    """
    Basic health check

    Always 200 while the process serves requests. The cache state is
    reported but never makes the service unhealthy.
    """
    return {
        "status": "healthy",
        "service": "glint-admin",
        "version": request.app.version,
        "cache": request.app.state.cache.status(),
        "timestamp": _now(),
    }


@router.get("/ready")
def readiness_check(request: Request, db: Session = Depends(get_db)):
    """
    Readiness check: the database must answer. Returns 503 when it does not
    or when it answers slower than one second.
    """
    checks: Dict[str, Any] = {
        "database": False,
        "database_latency_ms": None,
        "cache": request.app.state.cache.status()["state"],
    }

    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000
    except SQLAlchemyError as exc:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "checks": checks, "message": f"Database check failed: {exc}"},
        )

    checks["database"] = True
    checks["database_latency_ms"] = round(latency_ms, 2)
    if latency_ms > SLOW_DATABASE_MS:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "degraded", "checks": checks, "message": "Database latency is high"},
        )

    return {"status": "ready", "checks": checks, "timestamp": _now()}


@router.get("/live")
def liveness_check():
    """Liveness probe"""
    return {
        "status": "alive",
        "uptime_seconds": round(time.time() - STARTUP_TIME, 2),
        "timestamp": _now(),
    }
