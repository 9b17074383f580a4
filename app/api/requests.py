"""Freight quote and contact request endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.deps import get_cache, get_client_info, require_role
from app.database import get_db
from app.middleware.rate_limit import get_rate_limit, limiter
from app.models.audit_log import AuditAction
from app.schemas.common import SuccessResponse
from app.schemas.requests import (
    ContactRequestCreate,
    ContactRequestPage,
    FreightRequestCreate,
    FreightRequestPage,
    SubmissionReceipt,
)
from app.services import requests as request_service
from app.services.audit import record_audit
from app.utils.cache import CacheGate
from app.utils.jwt_utils import AdminIdentity

public_router = APIRouter(prefix="/api/requests", tags=["requests"])
admin_router = APIRouter(prefix="/api/admin/requests", tags=["requests"])


# ---------------------------------------------------------------------------
# Public forms
# ---------------------------------------------------------------------------

@public_router.post("/freight", response_model=SubmissionReceipt, status_code=201)
@limiter.limit(get_rate_limit("public_form"))
def submit_freight_request(
    request: Request,
    data: FreightRequestCreate,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
):
    """Submit a freight quote request (no authentication)."""
    client = get_client_info(request)
    submitted = request_service.create_freight_request(db, cache, data, client.ip_address, client.user_agent)
    return SubmissionReceipt(id=submitted.id)


@public_router.post("/contact", response_model=SubmissionReceipt, status_code=201)
@limiter.limit(get_rate_limit("public_form"))
def submit_contact_request(
    request: Request,
    data: ContactRequestCreate,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
):
    """Submit a contact message (no authentication)."""
    client = get_client_info(request)
    submitted = request_service.create_contact_request(db, cache, data, client.ip_address, client.user_agent)
    return SubmissionReceipt(id=submitted.id)


# ---------------------------------------------------------------------------
# Admin inboxes
# ---------------------------------------------------------------------------

@admin_router.get("/freight", response_model=FreightRequestPage)
def list_freight_requests(
    search: Optional[str] = Query(None, description="Match contact, company, email or phone"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    _: AdminIdentity = Depends(require_role("MANAGER")),
):
    return request_service.list_freight_requests(db, cache, search, page, limit)


@admin_router.get("/contact", response_model=ContactRequestPage)
def list_contact_requests(
    search: Optional[str] = Query(None, description="Match name, email or message"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    _: AdminIdentity = Depends(require_role("MANAGER")),
):
    return request_service.list_contact_requests(db, cache, search, page, limit)


def _audit_delete(db: Session, request: Request, admin: AdminIdentity, request_id: str, resource_type: str) -> None:
    client = get_client_info(request)
    record_audit(
        db,
        AuditAction.DELETE_REQUEST,
        admin_id=admin.id,
        admin_email=admin.email,
        resource_id=request_id,
        resource_type=resource_type,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )


@admin_router.delete("/freight/{request_id}", response_model=SuccessResponse)
def delete_freight_request(
    request_id: str,
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    request_service.delete_freight_request(db, cache, request_id)
    _audit_delete(db, request, admin, request_id, "FreightRequest")
    return SuccessResponse()


@admin_router.delete("/contact/{request_id}", response_model=SuccessResponse)
def delete_contact_request(
    request_id: str,
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    request_service.delete_contact_request(db, cache, request_id)
    _audit_delete(db, request, admin, request_id, "ContactRequest")
    return SuccessResponse()
