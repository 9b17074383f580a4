"""
Create or update the SUPER_ADMIN account.

Reads ADMIN_EMAIL and ADMIN_PASSWORD from the environment:
    ADMIN_EMAIL=owner@example.com ADMIN_PASSWORD='...' python seed_admin.py

An existing account with that email gets the new password and the
SUPER_ADMIN role; its refresh tokens are revoked.
"""
import os
import sys

from app.database import SessionLocal
from app.models.admin_user import AdminUser
from app.utils.auth import normalize_email, revoke_all_refresh_tokens
from app.utils.logger import logger
from app.utils.passwords import hash_password, validate_password


def seed_super_admin(email: str, password: str) -> AdminUser:
    check = validate_password(password)
    if not check.valid:
        raise ValueError(check.reason)

    email = normalize_email(email)
    db = SessionLocal()
    try:
        admin = db.query(AdminUser).filter(AdminUser.email == email).first()
        if admin is None:
            admin = AdminUser(email=email, password_hash=hash_password(password), role="SUPER_ADMIN")
            db.add(admin)
            db.commit()
        else:
            admin.password_hash = hash_password(password)
            admin.role = "SUPER_ADMIN"
            db.commit()
            revoke_all_refresh_tokens(db, admin.id)
        db.refresh(admin)
        db.expunge(admin)
        return admin
    finally:
        db.close()


def main() -> int:
    email = os.environ.get("ADMIN_EMAIL")
    password = os.environ.get("ADMIN_PASSWORD")
    if not email or not password:
        print("Missing ADMIN_EMAIL or ADMIN_PASSWORD", file=sys.stderr)
        return 1

    try:
        admin = seed_super_admin(email, password)
    except ValueError as exc:
        print(f"Refusing weak password: {exc}", file=sys.stderr)
        return 1

    logger.info(f"Admin user created/updated: {admin.email}", extra={"admin_id": admin.id})
    return 0


if __name__ == "__main__":
    sys.exit(main())
