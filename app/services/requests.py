"""Freight quote and contact request inboxes"""
from typing import Any, Dict, Optional, Type

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.requests import ContactRequest, FreightRequest
from app.schemas.requests import ContactRequestCreate, FreightRequestCreate
from app.services.errors import NotFoundError
from app.services.pagination import paginate
from app.utils.cache import CacheGate, cache_key
from app.utils.logger import logger

LIST_TTL = 60

FREIGHT_NAMESPACE = "requests:freight"
CONTACT_NAMESPACE = "requests:contact"

_FREIGHT_FIELDS = (
    "id", "company_name", "contact_name", "email", "phone", "is_broker", "equipment", "cargo",
    "weight", "pallets", "pickup_address", "pickup_date", "pickup_time", "delivery_address",
    "delivery_date", "delivery_time", "reference_id", "notes", "applicant_ip", "user_agent", "created_at",
)
_CONTACT_FIELDS = ("id", "name", "email", "message", "applicant_ip", "user_agent", "created_at")


def _serializer(fields):
    return lambda row: {field: getattr(row, field) for field in fields}


def create_freight_request(
    db: Session,
    cache: CacheGate,
    data: FreightRequestCreate,
    applicant_ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> FreightRequest:
    # Blank optional strings are stored as NULL
    values = {key: (value or None) if isinstance(value, str) else value for key, value in data.model_dump().items()}
    request = FreightRequest(**values, applicant_ip=applicant_ip, user_agent=user_agent)
    db.add(request)
    db.commit()
    db.refresh(request)

    cache.invalidate(f"{FREIGHT_NAMESPACE}:*")
    logger.info(f"Freight request received: {request.id}", extra={"resource_id": request.id})
    return request


def create_contact_request(
    db: Session,
    cache: CacheGate,
    data: ContactRequestCreate,
    applicant_ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> ContactRequest:
    request = ContactRequest(
        name=data.name,
        email=data.email,
        message=data.message,
        applicant_ip=applicant_ip,
        user_agent=user_agent,
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    cache.invalidate(f"{CONTACT_NAMESPACE}:*")
    logger.info(f"Contact request received: {request.id}", extra={"resource_id": request.id})
    return request


def list_freight_requests(
    db: Session, cache: CacheGate, search: Optional[str] = None, page: int = 1, limit: int = 20
) -> Dict[str, Any]:
    """Freight requests matching ``search`` on contact, company, email or phone"""
    search = search.strip() if search else None

    def fetch() -> Dict[str, Any]:
        query = db.query(FreightRequest)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                FreightRequest.contact_name.ilike(pattern),
                FreightRequest.company_name.ilike(pattern),
                FreightRequest.email.ilike(pattern),
                FreightRequest.phone.ilike(pattern),
            ))
        query = query.order_by(FreightRequest.created_at.desc())
        return paginate(query, page, limit, "requests", _serializer(_FREIGHT_FIELDS))

    key = cache_key(f"{FREIGHT_NAMESPACE}:list", search=search, page=page, limit=limit)
    return cache.get_cached(key, fetch, LIST_TTL)


def list_contact_requests(
    db: Session, cache: CacheGate, search: Optional[str] = None, page: int = 1, limit: int = 20
) -> Dict[str, Any]:
    """Contact requests matching ``search`` on name, email or message"""
    search = search.strip() if search else None

    def fetch() -> Dict[str, Any]:
        query = db.query(ContactRequest)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                ContactRequest.name.ilike(pattern),
                ContactRequest.email.ilike(pattern),
                ContactRequest.message.ilike(pattern),
            ))
        query = query.order_by(ContactRequest.created_at.desc())
        return paginate(query, page, limit, "requests", _serializer(_CONTACT_FIELDS))

    key = cache_key(f"{CONTACT_NAMESPACE}:list", search=search, page=page, limit=limit)
    return cache.get_cached(key, fetch, LIST_TTL)


def _delete(db: Session, model: Type, request_id: str, not_found: str) -> None:
    row = db.query(model).filter(model.id == request_id).first()
    if row is None:
        raise NotFoundError(not_found)
    db.delete(row)
    db.commit()


def delete_freight_request(db: Session, cache: CacheGate, request_id: str) -> None:
    _delete(db, FreightRequest, request_id, "Freight request not found")
    cache.invalidate(f"{FREIGHT_NAMESPACE}:*")


def delete_contact_request(db: Session, cache: CacheGate, request_id: str) -> None:
    _delete(db, ContactRequest, request_id, "Contact request not found")
    cache.invalidate(f"{CONTACT_NAMESPACE}:*")
