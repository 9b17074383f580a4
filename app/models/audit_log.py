"""Audit log model"""
import enum

from sqlalchemy import Column, DateTime, JSON, String, Text

from app.database import Base, generate_uuid_string, utcnow


class AuditAction(str, enum.Enum):
    """Kinds of admin activity recorded in the audit trail"""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE_APPLICATION = "CREATE_APPLICATION"
    VIEW_APPLICATION = "VIEW_APPLICATION"
    UPDATE_STATUS = "UPDATE_STATUS"
    DECRYPT_SSN = "DECRYPT_SSN"
    DELETE_APPLICATION = "DELETE_APPLICATION"
    CREATE_ADMIN = "CREATE_ADMIN"
    UPDATE_ADMIN = "UPDATE_ADMIN"
    UPDATE_PROFILE = "UPDATE_PROFILE"
    DELETE_ADMIN = "DELETE_ADMIN"
    CREATE_TRUCK = "CREATE_TRUCK"
    UPDATE_TRUCK = "UPDATE_TRUCK"
    DELETE_TRUCK = "DELETE_TRUCK"
    RESET_OIL_CHANGE = "RESET_OIL_CHANGE"
    DELETE_REQUEST = "DELETE_REQUEST"


class AuditLog(Base):
    """AuditLog model - append-only record of admin actions.

    ``admin_id`` deliberately carries no foreign key: entries must outlive the
    admin accounts they reference.
    """

    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    admin_id = Column(String(36), nullable=True, index=True)
    admin_email = Column(String(255), nullable=True)
    action = Column(String(50), nullable=False, index=True)
    resource_id = Column(String(36), nullable=True, index=True)
    resource_type = Column(String(50), nullable=True)
    details = Column(JSON, default=dict, nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
