"""Database models"""
from app.models.admin_user import AdminUser
from app.models.audit_log import AuditAction, AuditLog
from app.models.driver_application import DriverApplication
from app.models.refresh_token import RefreshToken
from app.models.requests import ContactRequest, FreightRequest
from app.models.truck import Truck

__all__ = [
    "AdminUser",
    "AuditAction",
    "AuditLog",
    "ContactRequest",
    "DriverApplication",
    "FreightRequest",
    "RefreshToken",
    "Truck",
]
