"""Driver application review (admin side)"""
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.database import utcnow
from app.models.driver_application import DriverApplication
from app.services.errors import NotFoundError, ValidationFailedError
from app.services.pagination import paginate
from app.utils.auth import authenticate
from app.utils.cache import CacheGate, cache_key
from app.utils.crypto import decrypt_field, format_ssn, mask_ssn

CACHE_NAMESPACE = "applications"
LIST_TTL = 60
DETAIL_TTL = 60


def detail_key(application_id: str) -> str:
    return cache_key(f"{CACHE_NAMESPACE}:detail", id=application_id)


def invalidate_applications(cache: CacheGate, application_id: Optional[str] = None) -> None:
    if application_id:
        cache.delete_key(detail_key(application_id))
    cache.invalidate(f"{CACHE_NAMESPACE}:*")


def _summary(application: DriverApplication) -> Dict[str, Any]:
    return {
        "id": application.id,
        "first_name": application.first_name,
        "last_name": application.last_name,
        "email": application.email,
        "phone": application.phone,
        "status": application.status,
        "ssn_last4": application.ssn_last4,
        "created_at": application.created_at,
    }


def _detail(application: DriverApplication) -> Dict[str, Any]:
    reviewer = application.reviewed_by
    return jsonable_encoder({
        "id": application.id,
        "first_name": application.first_name,
        "last_name": application.last_name,
        "date_of_birth": application.date_of_birth,
        "phone": application.phone,
        "email": application.email,
        "current_address_line1": application.current_address_line1,
        "current_city": application.current_city,
        "current_state": application.current_state,
        "current_zip": application.current_zip,
        "lived_at_current_more_than_3_years": application.lived_at_current_more_than_3_years,
        "ssn_last4": application.ssn_last4,
        "ssn_masked": mask_ssn(application.ssn_last4),
        "has_ssn": bool(application.ssn_encrypted),
        "applicant_type": application.applicant_type,
        "truck_year": application.truck_year,
        "truck_make": application.truck_make,
        "alcohol_drug_return_to_duty": application.alcohol_drug_return_to_duty,
        "medical_card_expires_at": application.medical_card_expires_at,
        "license": application.license or {},
        "previous_addresses": application.previous_addresses or [],
        "employment_records": application.employment_records or [],
        "legal_consents": application.legal_consents or [],
        "status": application.status,
        "internal_notes": application.internal_notes,
        "reviewed_by": (
            {"id": reviewer.id, "email": reviewer.email, "role": reviewer.role} if reviewer else None
        ),
        "reviewed_at": application.reviewed_at,
        "applicant_ip": application.applicant_ip,
        "user_agent": application.user_agent,
        "created_at": application.created_at,
        "updated_at": application.updated_at,
    })


def _get_or_404(db: Session, application_id: str) -> DriverApplication:
    application = db.query(DriverApplication).filter(DriverApplication.id == application_id).first()
    if application is None:
        raise NotFoundError("Application not found")
    return application


def list_applications(
    db: Session,
    cache: CacheGate,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
) -> Dict[str, Any]:
    """Applications matching ``status`` and a first/last-name ``search``, newest first"""
    search = search.strip() if search else None
    key = cache_key(f"{CACHE_NAMESPACE}:list", status=status, search=search, page=page, limit=limit)

    def fetch() -> Dict[str, Any]:
        query = db.query(DriverApplication)
        if status:
            query = query.filter(DriverApplication.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                DriverApplication.first_name.ilike(pattern),
                DriverApplication.last_name.ilike(pattern),
            ))
        query = query.order_by(DriverApplication.created_at.desc())
        return paginate(query, page, limit, "applications", _summary)

    return cache.get_cached(key, fetch, LIST_TTL)


def get_application(db: Session, cache: CacheGate, application_id: str) -> Dict[str, Any]:
    """Full application detail (SSN masked). Raises NotFoundError."""
    return cache.get_cached(
        detail_key(application_id),
        lambda: _detail(_get_or_404(db, application_id)),
        DETAIL_TTL,
    )


def update_status(
    db: Session,
    cache: CacheGate,
    application_id: str,
    status: str,
    internal_notes: Optional[str],
    reviewer_id: str,
) -> Dict[str, Any]:
    """Record a review decision and the reviewer"""
    application = _get_or_404(db, application_id)
    application.status = status
    application.internal_notes = internal_notes
    application.reviewed_by_id = reviewer_id
    application.reviewed_at = utcnow()
    db.commit()
    db.refresh(application)

    invalidate_applications(cache, application_id)
    return _detail(application)


def decrypt_ssn(db: Session, application_id: str, admin_email: str, password: str) -> str:
    """
    Reveal an applicant's SSN formatted as ``XXX-XX-XXXX``

    Step-up check: the caller's password is verified again and the caller
    must currently be a SUPER_ADMIN.

    Raises:
        ValidationFailedError: wrong password or insufficient role
        NotFoundError: unknown application or no SSN on file
        FieldDecryptionError: stored envelope is corrupt
        ConfigurationError: no encryption key configured
    """
    identity = authenticate(db, admin_email, password)
    if identity is None or identity.role != "SUPER_ADMIN":
        raise ValidationFailedError("Invalid credentials or insufficient permissions")

    application = _get_or_404(db, application_id)
    if not application.ssn_encrypted:
        raise NotFoundError("No SSN on file")

    return format_ssn(decrypt_field(application.ssn_encrypted))


def delete_application(db: Session, cache: CacheGate, application_id: str) -> None:
    application = _get_or_404(db, application_id)
    db.delete(application)
    db.commit()

    invalidate_applications(cache, application_id)
