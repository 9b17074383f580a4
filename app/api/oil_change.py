"""Oil-change bot proxy endpoints"""
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.deps import require_role
from app.services import oil_change as oil_change_service
from app.utils.jwt_utils import AdminIdentity

router = APIRouter(prefix="/api/admin/oil-change", tags=["oil-change"])


class OilChangeReset(BaseModel):
    truck_name: str = Field(..., min_length=1, description="Truck name as known to the bot")
    mileage: Optional[int] = Field(None, ge=0)


@router.get("/list")
def list_oil_changes(_: AdminIdentity = Depends(require_role("MANAGER"))) -> Any:
    """Every truck's oil-change status as reported by the bot."""
    return oil_change_service.list_oil_changes()


@router.get("/trucks")
def list_bot_trucks(_: AdminIdentity = Depends(require_role("MANAGER"))) -> Any:
    """Truck names known to the bot."""
    return oil_change_service.list_bot_trucks()


@router.get("/{truck_name}")
def get_truck_oil_change(truck_name: str, _: AdminIdentity = Depends(require_role("MANAGER"))) -> Any:
    return oil_change_service.get_truck_oil_change(truck_name)


@router.post("/reset")
def reset_oil_change(data: OilChangeReset, _: AdminIdentity = Depends(require_role("MANAGER"))) -> Any:
    return oil_change_service.reset_truck_oil_change(data.truck_name, data.mileage)
