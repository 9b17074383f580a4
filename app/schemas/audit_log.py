"""Audit log schemas"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from app.schemas.common import Pagination


class AuditLogResponse(BaseModel):
    """Schema for audit log response"""

    id: str
    admin_id: Optional[str]
    admin_email: Optional[str]
    action: str
    resource_id: Optional[str]
    resource_type: Optional[str]
    details: Dict[str, Any]
    ip_address: Optional[str]
    user_agent: Optional[str]
    created_at: datetime


class AuditLogPage(BaseModel):
    logs: List[AuditLogResponse]
    pagination: Pagination
