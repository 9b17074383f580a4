"""Pydantic schemas for request/response validation"""
from app.schemas.admin_user import AdminUserCreate, AdminUserResponse, AdminUserUpdate, ProfileUpdate
from app.schemas.audit_log import AuditLogPage, AuditLogResponse
from app.schemas.auth import LoginRequest, LoginResponse, SessionUser
from app.schemas.common import Pagination, SuccessResponse
from app.schemas.driver_application import ApplicationDetail, ApplicationPage, DriverApplicationCreate
from app.schemas.requests import ContactRequestCreate, FreightRequestCreate
from app.schemas.truck import TruckCreate, TruckResponse, TruckUpdate

__all__ = [
    "AdminUserCreate",
    "AdminUserResponse",
    "AdminUserUpdate",
    "ProfileUpdate",
    "AuditLogPage",
    "AuditLogResponse",
    "LoginRequest",
    "LoginResponse",
    "SessionUser",
    "Pagination",
    "SuccessResponse",
    "ApplicationDetail",
    "ApplicationPage",
    "DriverApplicationCreate",
    "ContactRequestCreate",
    "FreightRequestCreate",
    "TruckCreate",
    "TruckResponse",
    "TruckUpdate",
]
