"""RefreshToken model: opaque, server-side session renewal credentials"""
from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid_string, utcnow


class RefreshToken(Base):
    """Stores issued refresh tokens.

    A token is valid iff ``revoked_at`` is NULL and ``expires_at`` is in the future.
    Rows are never mutated except to set ``revoked_at``; dead rows are removed by
    ``prune_refresh_tokens()`` once they are older than the retention window.
    """

    __tablename__ = "refresh_tokens"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    token = Column(String(128), unique=True, nullable=False, index=True)   # 64 random bytes, hex
    admin_id = Column(String(36), ForeignKey("admin_users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    admin = relationship("AdminUser", back_populates="refresh_tokens")
