"""Admin user management endpoints"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.deps import ROLE_ANY, get_cache, get_client_info, require_role
from app.database import get_db
from app.models.audit_log import AuditAction
from app.schemas.admin_user import (
    AdminUserCreate,
    AdminUserList,
    AdminUserResponse,
    AdminUserResult,
    AdminUserUpdate,
    ProfileUpdate,
)
from app.schemas.common import SuccessResponse
from app.services import admin_users as admin_service
from app.services.audit import record_audit
from app.utils.cache import CacheGate
from app.utils.jwt_utils import AdminIdentity

router = APIRouter(prefix="/api/admin", tags=["admin-users"])


def _audit(db: Session, request: Request, admin: AdminIdentity, action: AuditAction, resource_id: str, details: dict) -> None:
    client = get_client_info(request)
    record_audit(
        db,
        action,
        admin_id=admin.id,
        admin_email=admin.email,
        resource_id=resource_id,
        resource_type="AdminUser",
        details=details,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )


# ---------------------------------------------------------------------------
# Admin user CRUD (super-admin only)
# ---------------------------------------------------------------------------

@router.get("/users", response_model=AdminUserList)
def list_admin_users(
    db: Session = Depends(get_db),
    _: AdminIdentity = Depends(require_role("SUPER_ADMIN")),
):
    """List all admin users, newest first."""
    return {"users": admin_service.list_admins(db)}


@router.post("/users", response_model=AdminUserResult, status_code=201)
def create_admin_user(
    request: Request,
    data: AdminUserCreate,
    db: Session = Depends(get_db),
    admin: AdminIdentity = Depends(require_role("SUPER_ADMIN")),
):
    """
    Create a MANAGER or VIEWER account.

    SUPER_ADMIN accounts cannot be created through the API.
    """
    user = admin_service.create_admin(db, data.email, data.password, data.role, data.name)
    _audit(db, request, admin, AuditAction.CREATE_ADMIN, user.id, {"email": user.email, "role": user.role})
    return {"success": True, "user": user}


@router.patch("/users/{admin_id}", response_model=AdminUserResult)
def update_admin_user(
    admin_id: str,
    request: Request,
    data: AdminUserUpdate,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("SUPER_ADMIN")),
):
    """Change another admin's role, password or name. Role and password changes end their sessions."""
    changes = data.model_dump(exclude_unset=True)
    kwargs = {"role": changes.get("role"), "password": changes.get("password")}
    if "name" in changes:
        kwargs["name"] = changes["name"]

    user = admin_service.update_admin(db, cache, admin_id, **kwargs)
    _audit(
        db, request, admin, AuditAction.UPDATE_ADMIN, user.id,
        {
            "role": changes.get("role"),
            "password_changed": bool(changes.get("password")),
            "name_changed": "name" in changes,
        },
    )
    return {"success": True, "user": user}


@router.delete("/users/{admin_id}", response_model=SuccessResponse)
def delete_admin_user(
    admin_id: str,
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("SUPER_ADMIN")),
):
    """Delete an admin. Applications they reviewed are kept with the reviewer cleared."""
    if admin_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    deleted = admin_service.delete_admin(db, cache, admin_id)
    _audit(db, request, admin, AuditAction.DELETE_ADMIN, admin_id, {"email": deleted["email"]})
    return SuccessResponse()


# ---------------------------------------------------------------------------
# Own profile (any role)
# ---------------------------------------------------------------------------

@router.patch("/me", response_model=AdminUserResult)
def update_my_profile(
    request: Request,
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    admin: AdminIdentity = Depends(require_role(ROLE_ANY)),
):
    """Update the caller's display name and/or password (current password required)."""
    changes = data.model_dump(exclude_unset=True)
    kwargs = {
        "current_password": changes.get("current_password"),
        "new_password": changes.get("new_password"),
    }
    if "name" in changes:
        kwargs["name"] = changes["name"]

    user = admin_service.update_profile(db, admin.id, **kwargs)
    _audit(
        db, request, admin, AuditAction.UPDATE_PROFILE, admin.id,
        {"name_changed": "name" in changes, "password_changed": bool(changes.get("new_password"))},
    )
    return {"success": True, "user": AdminUserResponse.model_validate(user)}
