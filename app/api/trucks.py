"""Truck and oil-change tracking endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import get_cache, get_client_info, require_role
from app.database import get_db
from app.models.audit_log import AuditAction
from app.schemas.common import SuccessResponse
from app.schemas.truck import TruckCreate, TruckList, TruckResponse, TruckUpdate
from app.services import trucks as truck_service
from app.services.audit import record_audit
from app.utils.cache import CacheGate
from app.utils.jwt_utils import AdminIdentity

router = APIRouter(prefix="/api/admin/trucks", tags=["trucks"])


def _audit(db: Session, request: Request, admin: AdminIdentity, action: AuditAction, truck_id: str, details: Optional[dict] = None) -> None:
    client = get_client_info(request)
    record_audit(
        db,
        action,
        admin_id=admin.id,
        admin_email=admin.email,
        resource_id=truck_id,
        resource_type="Truck",
        details=details,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )


@router.get("", response_model=TruckList)
def list_trucks(
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    _: AdminIdentity = Depends(require_role("MANAGER")),
):
    """All trucks with oil-change status, ordered by name."""
    return truck_service.list_trucks(db, cache)


@router.get("/{truck_id}", response_model=TruckResponse)
def get_truck(
    truck_id: str,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    _: AdminIdentity = Depends(require_role("MANAGER")),
):
    return truck_service.get_truck(db, cache, truck_id)


@router.post("", response_model=TruckResponse, status_code=201)
def create_truck(
    request: Request,
    data: TruckCreate,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    """
    Add a truck.

    ``expires_in_miles`` sets how many miles remain until the next oil change.
    """
    truck = truck_service.create_truck(
        db,
        cache,
        name=data.name,
        samsara_vehicle_id=data.samsara_vehicle_id,
        current_miles=data.current_miles,
        expires_in_miles=data.expires_in_miles,
        oil_change_interval_miles=data.oil_change_interval_miles,
    )
    _audit(db, request, admin, AuditAction.CREATE_TRUCK, truck["id"], {"name": truck["name"]})
    return truck


@router.patch("/{truck_id}", response_model=TruckResponse)
def update_truck(
    truck_id: str,
    request: Request,
    data: TruckUpdate,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    changes = data.model_dump(exclude_unset=True)
    truck = truck_service.update_truck(db, cache, truck_id, changes)
    _audit(db, request, admin, AuditAction.UPDATE_TRUCK, truck_id, {"fields": sorted(changes)})
    return truck


@router.post("/{truck_id}/oil/reset", response_model=TruckResponse)
def reset_oil_change(
    truck_id: str,
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    """Record an oil change at the truck's current mileage."""
    truck = truck_service.reset_oil_change(db, cache, truck_id)
    _audit(
        db, request, admin, AuditAction.RESET_OIL_CHANGE, truck_id,
        {"last_oil_change_miles": truck["last_oil_change_miles"]},
    )
    return truck


@router.delete("/{truck_id}", response_model=SuccessResponse)
def delete_truck(
    truck_id: str,
    request: Request,
    db: Session = Depends(get_db),
    cache: CacheGate = Depends(get_cache),
    admin: AdminIdentity = Depends(require_role("MANAGER")),
):
    truck_service.delete_truck(db, cache, truck_id)
    _audit(db, request, admin, AuditAction.DELETE_TRUCK, truck_id)
    return SuccessResponse()
