"""API dependencies for authentication and authorization.

Sessions are carried in two HttpOnly cookies:
  - ``token``         short-lived signed access token
  - ``refreshToken``  opaque, server-side refresh token

Every request is evaluated independently by :func:`require_role`: the access
token is tried first; if it is missing or invalid the refresh token is used to
mint a new one, which is sent back as a renewed ``token`` cookie.

RBAC
----
Role hierarchy (higher level → more permissions):
    SUPER_ADMIN (3) > MANAGER (2) > VIEWER (1)

The role checked is always the one currently stored for the admin, never the
claim inside the token, so demotions take effect on the next request.
"""
from typing import Callable, NamedTuple, Optional

from fastapi import Cookie, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.middleware.monitoring import record_auth_failure
from app.utils.auth import get_admin_identity, verify_refresh_token
from app.utils.cache import CacheGate
from app.utils.jwt_utils import AdminIdentity, create_access_token, verify_access_token
from app.utils.logger import logger

ACCESS_COOKIE = "token"
REFRESH_COOKIE = "refreshToken"

# Sentinel: any authenticated admin, regardless of role
ROLE_ANY = "ANY"

# ---------------------------------------------------------------------------
# Role hierarchy
# ---------------------------------------------------------------------------

_ROLE_HIERARCHY: dict[str, int] = {
    "SUPER_ADMIN": 3,
    "MANAGER": 2,
    "VIEWER": 1,
}


def role_satisfies(role: str, min_role: str) -> bool:
    """Whether ``role`` meets ``min_role`` in the hierarchy (``ANY`` always does)"""
    if min_role == ROLE_ANY:
        return True
    return _ROLE_HIERARCHY.get(role, 0) >= _ROLE_HIERARCHY[min_role]


class ClientInfo(NamedTuple):
    """Caller network details recorded on audit entries and submissions"""
    ip_address: Optional[str]
    user_agent: Optional[str]


def get_client_info(request: Request) -> ClientInfo:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else None
    return ClientInfo(ip_address=ip, user_agent=request.headers.get("user-agent"))


def get_cache(request: Request) -> CacheGate:
    """The application's cache gate, created at startup"""
    return request.app.state.cache


# ---------------------------------------------------------------------------
# Cookies
# ---------------------------------------------------------------------------

def set_access_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        ACCESS_COOKIE,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        REFRESH_COOKIE,
        token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def clear_session_cookies(response: Response) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name,
            path="/",
            httponly=True,
            secure=settings.is_production,
            samesite="strict",
        )


# ---------------------------------------------------------------------------
# require_role factory: role-gated dependency
# ---------------------------------------------------------------------------

def _unauthorized(reason: str) -> HTTPException:
    record_auth_failure(reason)
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def require_role(min_role: str) -> Callable:
    """Return a FastAPI dependency that authenticates the caller and enforces a minimum role.

    Usage::

        @router.get("/applications")
        def endpoint(admin: AdminIdentity = Depends(require_role("MANAGER"))):
            ...

    Args:
        min_role: ``SUPER_ADMIN`` | ``MANAGER`` | ``VIEWER`` | ``ANY``.

    Returns:
        A FastAPI-injectable callable resolving to :class:`AdminIdentity`;
        raises 401 when no admin can be resolved and 403 when the role is too low.
    """
    if min_role != ROLE_ANY and min_role not in _ROLE_HIERARCHY:
        raise ValueError(f"Unknown role: {min_role}")

    def _role_dep(
        request: Request,
        response: Response,
        db: Session = Depends(get_db),
        token: Optional[str] = Cookie(None, alias=ACCESS_COOKIE),
        refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    ) -> AdminIdentity:
        identity = verify_access_token(token)

        if identity is None and refresh_token:
            identity = verify_refresh_token(db, refresh_token)
            if identity is not None:
                set_access_cookie(response, create_access_token(identity))
                logger.info("Access token renewed from refresh token", extra={"admin_id": identity.id})

        if identity is None:
            raise _unauthorized("unauthenticated")

        current = get_admin_identity(db, identity.id)
        if current is None:
            raise _unauthorized("admin_missing")

        if not role_satisfies(current.role, min_role):
            record_auth_failure("forbidden")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")

        request.state.admin = current
        return current

    # Give FastAPI a unique name so it doesn't collapse distinct dependencies
    _role_dep.__name__ = f"require_role_{min_role.lower()}"
    return _role_dep
