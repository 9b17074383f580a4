"""Truck schemas"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class TruckCreate(BaseModel):
    """Schema for creating a truck"""

    name: str = Field(..., min_length=1, max_length=100, description="Unit name, unique across the fleet")
    samsara_vehicle_id: Optional[str] = Field(None, max_length=64)
    current_miles: int = Field(0, ge=0, description="Current odometer reading")
    expires_in_miles: Optional[int] = Field(
        None, description="Miles left until the next oil change; back-fills the last oil-change odometer"
    )
    oil_change_interval_miles: int = Field(30000, gt=0)


class TruckUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    samsara_vehicle_id: Optional[str] = Field(None, max_length=64)
    current_miles: Optional[int] = Field(None, ge=0)
    oil_change_interval_miles: Optional[int] = Field(None, gt=0)


class TruckResponse(BaseModel):
    """Truck with derived oil-change fields"""

    id: str
    name: str
    samsara_vehicle_id: Optional[str]
    current_miles: int
    current_miles_updated_at: Optional[datetime]
    last_oil_change_miles: Optional[int]
    last_oil_change_at: Optional[datetime]
    oil_change_interval_miles: int
    miles_since_last_oil_change: int
    miles_until_next_oil_change: int
    status: Literal["Good", "Soon", "Overdue"]
    created_at: datetime
    updated_at: datetime


class TruckList(BaseModel):
    trucks: List[TruckResponse]
