"""Origin/Referer checks for cookie-authenticated unsafe requests"""
from typing import Callable, Iterable, Optional
from urllib.parse import urlparse

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.middleware.monitoring import record_auth_failure
from app.utils.logger import logger

UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
# Cookie-authenticated surfaces; these are never exempt
PROTECTED_PATH_PREFIXES = ("/api/admin", "/api/auth")


def _origin(url: str) -> Optional[str]:
    """Normalize ``url`` to ``scheme://host[:port]``, or None when it is not an http(s) URL"""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}".lower()


def _forbidden(detail: str, request: Request) -> JSONResponse:
    record_auth_failure("csrf")
    logger.warning(
        f"CSRF check failed: {detail}",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": detail})


class CSRFMiddleware(BaseHTTPMiddleware):
    """Reject unsafe requests whose Origin or Referer is not an allowed frontend.

    Exempt prefixes (public intake forms, health) skip the check entirely.
    Admin and auth paths additionally require at least one of the two headers.
    """

    def __init__(
        self,
        app,
        allowed_origins: Optional[Iterable[str]] = None,
        exempt_paths: Optional[Iterable[str]] = None,
    ):
        super().__init__(app)
        origins = settings.allowed_origins_list if allowed_origins is None else allowed_origins
        self.allowed_origins = {o for o in (_origin(entry) for entry in origins) if o}
        self.exempt_paths = tuple(settings.csrf_exempt_paths_list if exempt_paths is None else exempt_paths)

    def _is_exempt(self, path: str) -> bool:
        if path.startswith(PROTECTED_PATH_PREFIXES):
            return False
        return any(path.startswith(prefix) for prefix in self.exempt_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method.upper() not in UNSAFE_METHODS:
            return await call_next(request)

        path = request.url.path
        if self._is_exempt(path):
            return await call_next(request)

        origin = request.headers.get("origin", "").strip()
        referer = request.headers.get("referer", "").strip()

        if origin and _origin(origin) not in self.allowed_origins:
            return _forbidden("CSRF protection: Invalid origin", request)

        if referer and _origin(referer) not in self.allowed_origins:
            return _forbidden("CSRF protection: Invalid referer", request)

        if path.startswith(PROTECTED_PATH_PREFIXES) and not origin and not referer:
            return _forbidden("CSRF protection: Missing origin/referer", request)

        return await call_next(request)
