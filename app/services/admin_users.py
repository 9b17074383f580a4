"""Admin account management"""
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.admin_user import AdminUser
from app.models.driver_application import DriverApplication
from app.services.applications import invalidate_applications
from app.services.errors import ConflictError, NotFoundError, ValidationFailedError
from app.utils.auth import normalize_email, revoke_all_refresh_tokens
from app.utils.cache import CacheGate
from app.utils.logger import logger
from app.utils.passwords import hash_password, validate_password, verify_password

# Roles that may be granted through the API; SUPER_ADMIN only comes from seeding
ASSIGNABLE_ROLES = ("MANAGER", "VIEWER")

_UNSET = object()


def _require_strong(password: str) -> None:
    check = validate_password(password)
    if not check.valid:
        raise ValidationFailedError(check.reason)


def _get_or_404(db: Session, admin_id: str, detail: str = "Admin not found") -> AdminUser:
    admin = db.query(AdminUser).filter(AdminUser.id == admin_id).first()
    if admin is None:
        raise NotFoundError(detail)
    return admin


def list_admins(db: Session) -> List[AdminUser]:
    return db.query(AdminUser).order_by(AdminUser.created_at.desc()).all()


def create_admin(db: Session, email: str, password: str, role: str, name: Optional[str] = None) -> AdminUser:
    """
    Create a MANAGER or VIEWER account

    Raises:
        ConflictError: an admin with the normalized email already exists
        ValidationFailedError: weak password or a non-assignable role
    """
    email = normalize_email(email)
    if db.query(AdminUser).filter(AdminUser.email == email).first():
        raise ConflictError("An admin with this email already exists")

    _require_strong(password)

    if role not in ASSIGNABLE_ROLES:
        raise ValidationFailedError("Cannot create SUPER_ADMIN via API")

    admin = AdminUser(email=email, password_hash=hash_password(password), name=name, role=role)
    db.add(admin)
    db.commit()
    db.refresh(admin)

    logger.info(f"Created admin user: {admin.id}", extra={"admin_id": admin.id})
    return admin


def update_admin(
    db: Session,
    cache: CacheGate,
    admin_id: str,
    role: Optional[str] = None,
    password: Optional[str] = None,
    name=_UNSET,
) -> AdminUser:
    """
    Change another admin's role, password or name

    A role or password change revokes the target's refresh tokens so the
    change cannot be outlived by an existing session.
    Cached application details embed the reviewer's role, so a role change
    invalidates them.
    """
    admin = _get_or_404(db, admin_id)
    if password:
        _require_strong(password)

    role_changed = role is not None and role != admin.role
    revoke = role_changed
    if role_changed:
        admin.role = role
    if name is not _UNSET:
        admin.name = name
    if password:
        admin.password_hash = hash_password(password)
        revoke = True

    db.commit()
    db.refresh(admin)

    if revoke:
        revoke_all_refresh_tokens(db, admin.id)
    if role_changed:
        invalidate_applications(cache)
    return admin


def update_profile(
    db: Session,
    admin_id: str,
    name=_UNSET,
    current_password: Optional[str] = None,
    new_password: Optional[str] = None,
) -> AdminUser:
    """Update the caller's own name and/or password; a new password needs the current one"""
    admin = _get_or_404(db, admin_id, "User not found")

    if new_password:
        _require_strong(new_password)
        if not current_password:
            raise ValidationFailedError("Current password is required to set a new password")
        if not verify_password(current_password, admin.password_hash):
            raise ValidationFailedError("Current password is incorrect")
        admin.password_hash = hash_password(new_password)

    if name is not _UNSET:
        admin.name = name

    db.commit()
    db.refresh(admin)

    if new_password:
        revoke_all_refresh_tokens(db, admin.id)
    return admin


def delete_admin(db: Session, cache: CacheGate, admin_id: str) -> Dict[str, str]:
    """Delete an admin; applications they reviewed keep their row with the reviewer cleared"""
    admin = _get_or_404(db, admin_id)
    deleted = {"id": admin.id, "email": admin.email}

    db.query(DriverApplication).filter(DriverApplication.reviewed_by_id == admin_id).update(
        {DriverApplication.reviewed_by_id: None}, synchronize_session=False
    )
    db.delete(admin)
    db.commit()
    invalidate_applications(cache)

    logger.info(f"Deleted admin user: {admin_id}", extra={"admin_id": admin_id})
    return deleted
