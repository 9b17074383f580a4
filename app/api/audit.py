"""Audit log query endpoint"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import require_role
from app.database import get_db
from app.models.audit_log import AuditAction
from app.schemas.audit_log import AuditLogPage
from app.services.audit import DEFAULT_AUDIT_PAGE_SIZE, list_audit_logs
from app.utils.jwt_utils import AdminIdentity

router = APIRouter(prefix="/api/admin/audit-logs", tags=["audit"])


@router.get("", response_model=AuditLogPage)
def get_audit_logs(
    admin_id: Optional[str] = Query(None, description="Only entries by this admin"),
    action: Optional[AuditAction] = Query(None, description="Only this action"),
    resource_id: Optional[str] = Query(None, description="Only entries about this resource"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_AUDIT_PAGE_SIZE, ge=1, le=200),
    db: Session = Depends(get_db),
    _: AdminIdentity = Depends(require_role("SUPER_ADMIN")),
):
    """Audit trail, newest first (SUPER_ADMIN only)."""
    return list_audit_logs(db, admin_id, action, resource_id, page, limit)
