"""Authentication utilities: credential checks and refresh-token sessions"""
import secrets
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import utcnow
from app.models.admin_user import AdminUser
from app.models.refresh_token import RefreshToken
from app.utils.jwt_utils import AdminIdentity
from app.utils.logger import logger
from app.utils.passwords import hash_password, verify_password

REFRESH_TOKEN_BYTES = 64


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookup"""
    return email.strip().lower()


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


def to_identity(admin: AdminUser) -> AdminIdentity:
    return AdminIdentity(id=admin.id, email=admin.email, role=admin.role)


def authenticate(db: Session, email: str, password: str) -> Optional[AdminIdentity]:
    """
    Verify credentials and return the admin identity

    An unknown email still runs a bcrypt comparison against a throwaway hash,
    so the response time does not reveal whether the account exists.

    Args:
        db: Database session
        email: Email as typed; normalized before lookup
        password: Plaintext password

    Returns:
        AdminIdentity if the credentials match, None otherwise
    """
    admin = db.query(AdminUser).filter(AdminUser.email == normalize_email(email)).first()

    if admin is None:
        verify_password(password, _dummy_hash())
        return None

    if not verify_password(password, admin.password_hash):
        return None

    return to_identity(admin)


def get_admin_identity(db: Session, admin_id: str) -> Optional[AdminIdentity]:
    """Current identity (database role) for ``admin_id``, or None if the admin no longer exists"""
    admin = db.query(AdminUser).filter(AdminUser.id == admin_id).first()
    return to_identity(admin) if admin else None


# ---------------------------------------------------------------------------
# Refresh tokens
# ---------------------------------------------------------------------------

def issue_refresh_token(db: Session, admin_id: str) -> str:
    """Persist a new refresh token for ``admin_id`` and return its raw value"""
    token = secrets.token_hex(REFRESH_TOKEN_BYTES)
    db.add(RefreshToken(
        token=token,
        admin_id=admin_id,
        expires_at=utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    ))
    db.commit()
    return token


def verify_refresh_token(db: Session, token: Optional[str]) -> Optional[AdminIdentity]:
    """
    Resolve a refresh token to its owner's current identity

    Valid only if a matching row exists that is neither revoked nor expired.
    The returned role is read from the admin row, not from issuance time.
    Database errors are logged and treated as an invalid token.
    """
    if not token:
        return None

    try:
        row = (
            db.query(RefreshToken)
            .filter(
                RefreshToken.token == token,
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > utcnow(),
            )
            .first()
        )
        if row is None:
            return None
        return get_admin_identity(db, row.admin_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Refresh token lookup failed", extra={"error": str(exc)})
        return None


def revoke_refresh_token(db: Session, token: str, admin_id: Optional[str] = None) -> int:
    """
    Revoke one refresh token; idempotent. Returns the number of rows revoked.

    With ``admin_id`` only a token owned by that admin is touched.
    """
    query = db.query(RefreshToken).filter(RefreshToken.token == token, RefreshToken.revoked_at.is_(None))
    if admin_id is not None:
        query = query.filter(RefreshToken.admin_id == admin_id)
    count = query.update({RefreshToken.revoked_at: utcnow()}, synchronize_session=False)
    db.commit()
    return count


def revoke_all_refresh_tokens(db: Session, admin_id: str) -> int:
    """Revoke every live refresh token of ``admin_id``. Returns the number of rows revoked."""
    count = (
        db.query(RefreshToken)
        .filter(RefreshToken.admin_id == admin_id, RefreshToken.revoked_at.is_(None))
        .update({RefreshToken.revoked_at: utcnow()}, synchronize_session=False)
    )
    db.commit()
    if count:
        logger.info(f"Revoked {count} refresh tokens", extra={"admin_id": admin_id})
    return count


def prune_refresh_tokens(db: Session, retention_days: Optional[int] = None) -> int:
    """Delete refresh tokens that expired or were revoked more than ``retention_days`` ago"""
    if retention_days is None:
        retention_days = settings.REFRESH_TOKEN_RETENTION_DAYS
    cutoff = utcnow() - timedelta(days=retention_days)

    count = (
        db.query(RefreshToken)
        .filter(or_(RefreshToken.expires_at < cutoff, RefreshToken.revoked_at < cutoff))
        .delete(synchronize_session=False)
    )
    db.commit()
    if count:
        logger.info(f"Pruned {count} dead refresh tokens")
    return count
