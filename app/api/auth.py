"""Session endpoints: login, logout, refresh and current user"""
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from app.api.deps import (
    REFRESH_COOKIE,
    ROLE_ANY,
    clear_session_cookies,
    get_client_info,
    require_role,
    set_access_cookie,
    set_refresh_cookie,
)
from app.database import get_db
from app.middleware.monitoring import record_auth_failure
from app.middleware.rate_limit import get_rate_limit, limiter
from app.models.admin_user import AdminUser
from app.models.audit_log import AuditAction
from app.schemas.auth import LoginRequest, LoginResponse, SessionUser
from app.schemas.common import SuccessResponse
from app.services.audit import record_audit
from app.utils.auth import (
    authenticate,
    issue_refresh_token,
    prune_refresh_tokens,
    revoke_all_refresh_tokens,
    revoke_refresh_token,
    verify_refresh_token,
)
from app.utils.jwt_utils import AdminIdentity, create_access_token
from app.utils.logger import logger

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(get_rate_limit("login"))
def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
):
    """
    Log in with email and password.

    Sets two HttpOnly, SameSite=Strict cookies: ``token`` (access, 15 minutes)
    and ``refreshToken`` (7 days). Unknown emails and wrong passwords get the
    same 401 response.
    """
    identity = authenticate(db, credentials.email, credentials.password)
    if identity is None:
        record_auth_failure("invalid_credentials")
        logger.warning("Failed login attempt", extra={"path": request.url.path})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    set_access_cookie(response, create_access_token(identity))
    set_refresh_cookie(response, issue_refresh_token(db, identity.id))
    prune_refresh_tokens(db)

    client = get_client_info(request)
    record_audit(
        db,
        AuditAction.LOGIN,
        admin_id=identity.id,
        admin_email=identity.email,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )

    logger.info("Admin logged in", extra={"admin_id": identity.id})
    return LoginResponse(user=SessionUser(id=identity.id, email=identity.email, role=identity.role))


@router.post("/logout", response_model=SuccessResponse)
def logout(
    request: Request,
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    admin: AdminIdentity = Depends(require_role(ROLE_ANY)),
    db: Session = Depends(get_db),
):
    """Revoke the presented refresh token and every other session of the caller, then clear cookies."""
    if refresh_token:
        revoke_refresh_token(db, refresh_token, admin_id=admin.id)
    revoke_all_refresh_tokens(db, admin.id)

    client = get_client_info(request)
    record_audit(
        db,
        AuditAction.LOGOUT,
        admin_id=admin.id,
        admin_email=admin.email,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )

    clear_session_cookies(response)
    return SuccessResponse()


@router.get("/me")
def me(
    admin: AdminIdentity = Depends(require_role(ROLE_ANY)),
    db: Session = Depends(get_db),
):
    """Current admin profile."""
    user = db.query(AdminUser).filter(AdminUser.id == admin.id).first()
    return {
        "success": True,
        "user": SessionUser(id=user.id, email=user.email, role=user.role, name=user.name),
    }


@router.post("/refresh", response_model=SuccessResponse)
def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    db: Session = Depends(get_db),
):
    """Mint a new access-token cookie from a valid ``refreshToken`` cookie."""
    if not refresh_token:
        record_auth_failure("unauthenticated")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token required")

    identity = verify_refresh_token(db, refresh_token)
    if identity is None:
        record_auth_failure("unauthenticated")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired refresh token")

    set_access_cookie(response, create_access_token(identity))
    return SuccessResponse()
