"""AdminUser model: named admin accounts with RBAC roles"""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid_string, utcnow

ADMIN_ROLES = ("SUPER_ADMIN", "MANAGER", "VIEWER")


class AdminUser(Base):
    """An admin portal account.

    ``email`` is stored lowercased and trimmed so that exactly one row exists
    per normalized address. Deleting an admin cascades to its refresh tokens
    only; applications it reviewed keep their row with ``reviewed_by_id`` cleared.
    """

    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200), nullable=True)
    role = Column(String(20), nullable=False, default="VIEWER")   # SUPER_ADMIN | MANAGER | VIEWER
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="admin",
        cascade="all, delete-orphan",
    )
