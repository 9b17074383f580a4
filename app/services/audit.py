"""Audit trail writes and queries"""
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.middleware.monitoring import record_audit_failure
from app.models.audit_log import AuditAction, AuditLog
from app.services.pagination import paginate
from app.utils.logger import logger

DEFAULT_AUDIT_PAGE_SIZE = 50


def record_audit(
    db: Session,
    action: AuditAction,
    admin_id: Optional[str] = None,
    admin_email: Optional[str] = None,
    resource_id: Optional[str] = None,
    resource_type: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """
    Append an audit entry

    Runs after the primary change has been committed. A failed write is rolled
    back, logged and counted but never raised, so auditing cannot fail the
    request it describes.

    Returns:
        True if the entry was persisted
    """
    entry = AuditLog(
        admin_id=admin_id,
        admin_email=admin_email,
        action=action.value,
        resource_id=resource_id,
        resource_type=resource_type,
        details=jsonable_encoder(details or {}),
        ip_address=ip_address,
        user_agent=user_agent,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        record_audit_failure()
        logger.error(
            "Failed to write audit log",
            extra={"action": action.value, "admin_id": admin_id, "resource_id": resource_id, "error": str(exc)},
        )
        return False
    return True


def list_audit_logs(
    db: Session,
    admin_id: Optional[str] = None,
    action: Optional[AuditAction] = None,
    resource_id: Optional[str] = None,
    page: int = 1,
    limit: int = DEFAULT_AUDIT_PAGE_SIZE,
) -> Dict[str, Any]:
    """Audit entries matching the filters, newest first"""
    query = db.query(AuditLog)
    if admin_id:
        query = query.filter(AuditLog.admin_id == admin_id)
    if action:
        query = query.filter(AuditLog.action == action.value)
    if resource_id:
        query = query.filter(AuditLog.resource_id == resource_id)

    query = query.order_by(AuditLog.created_at.desc())
    return paginate(query, page, limit, "logs", _serialize)


def _serialize(entry: AuditLog) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "admin_id": entry.admin_id,
        "admin_email": entry.admin_email,
        "action": entry.action,
        "resource_id": entry.resource_id,
        "resource_type": entry.resource_type,
        "details": entry.details or {},
        "ip_address": entry.ip_address,
        "user_agent": entry.user_agent,
        "created_at": entry.created_at,
    }
