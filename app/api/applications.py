"""Driver application review endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_cache, get_client_info, require_role
from app.database import get_db
from app.models.audit_log import AuditAction
from app.schemas.common import SuccessResponse
from app.schemas.driver_application import (
    ApplicationDetail,
    ApplicationPage,
    ApplicationStatus,
    DecryptSSNRequest,
    DecryptSSNResponse,
    StatusUpdate,
)
from app.services import applications as application_service
from app.services.audit import record_audit
from app.services.errors import ServiceError
from app.utils.cache import CacheGate
from app.utils.crypto import FieldDecryptionError
from app.utils.jwt_utils import AdminIdentity
from app.utils.logger import logger

router = APIRouter(prefix="/api/admin/applications", tags=["applications"])

RESOURCE_TYPE = "DriverApplication"


def _audit(db: Session, request: Request, admin: AdminIdentity, action: AuditAction, application_id: str, details: Optional[dict] = None) -> None:
    client = get_client_info(request)
    record_audit(
        db,
        action,
        admin_id=admin.id,
        admin_email=admin.email,
        resource_id=application_id,
        resource_type=RESOURCE_TYPE,
        details=details,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )


@router.get("", response_model=ApplicationPage)
def list_applications(
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status", description="Filter by review status"),
    search: Optional[str] = Query(None, description="Match first or last name"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    _: AdminIdentity = Depends(require_role("MANAGER")),
):
    """List applications, newest first."""
    return application_service.list_applications(db, cache, status_filter, search, page, limit)


@router.get("/{application_id}", response_model=ApplicationDetail)
def get_application(
    application_id: str,
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    """Full application with the SSN masked."""
    application = application_service.get_application(db, cache, application_id)
    _audit(db, request, admin, AuditAction.VIEW_APPLICATION, application_id)
    return application


@router.patch("/{application_id}/status", response_model=ApplicationDetail)
def update_application_status(
    application_id: str,
    request: Request,
    data: StatusUpdate,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    """Set the review status and notes; the caller is recorded as reviewer."""
    application = application_service.update_status(
        db, cache, application_id, data.status, data.internal_notes, admin.id
    )
    _audit(
        db, request, admin, AuditAction.UPDATE_STATUS, application_id,
        {"status": data.status, "has_notes": bool(data.internal_notes)},
    )
    return application


@router.post("/{application_id}/decrypt-ssn", response_model=DecryptSSNResponse)
def decrypt_ssn(
    application_id: str,
    request: Request,
    data: DecryptSSNRequest,
    db: Session = Depends(get_db),
    admin: AdminIdentity = Depends(require_role("SUPER_ADMIN")),
):
    """
    Reveal an applicant's SSN (SUPER_ADMIN only).

    The caller must re-enter their password. Any refusal gets the same 401
    response; a missing encryption key surfaces as 503.
    """
    try:
        ssn = application_service.decrypt_ssn(db, application_id, admin.email, data.password)
    except (ServiceError, FieldDecryptionError) as exc:
        logger.warning(
            f"SSN decrypt refused: {exc}",
            extra={"admin_id": admin.id, "resource_id": application_id},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password or insufficient permissions",
        )

    _audit(db, request, admin, AuditAction.DECRYPT_SSN, application_id)
    return DecryptSSNResponse(ssn=ssn)


@router.delete("/{application_id}", response_model=SuccessResponse)
def delete_application(
    application_id: str,
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    """Delete an application permanently."""
    application_service.delete_application(db, cache, application_id)
    _audit(db, request, admin, AuditAction.DELETE_APPLICATION, application_id)
    return SuccessResponse()
