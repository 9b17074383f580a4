"""Public driver application intake"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import get_cache, get_client_info
from app.database import get_db
from app.middleware.rate_limit import get_rate_limit, limiter
from app.models.audit_log import AuditAction
from app.schemas.driver_application import ApplicationReceipt, DriverApplicationCreate
from app.services import driver_applications as intake_service
from app.services.audit import record_audit
from app.utils.cache import CacheGate

router = APIRouter(prefix="/api/driver-applications", tags=["driver-applications"])


@router.post("", response_model=ApplicationReceipt, status_code=201)
@limiter.limit(get_rate_limit("public_form"))
def submit_application(
    request: Request,
    data: DriverApplicationCreate,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
):
    """
    Submit a driver application (no authentication).

    The SSN, if provided, is encrypted before storage.
    """
    client = get_client_info(request)
    application = intake_service.create_application(
        db, cache, data, applicant_ip=client.ip_address, user_agent=client.user_agent
    )
    record_audit(
        db,
        AuditAction.CREATE_APPLICATION,
        resource_id=application.id,
        resource_type="DriverApplication",
        details={"first_name": data.first_name, "last_name": data.last_name},
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return ApplicationReceipt(id=application.id)
