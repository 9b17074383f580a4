"""Freight quote and contact request schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import Pagination


class FreightRequestCreate(BaseModel):
    """Schema for the public freight quote form"""

    company_name: Optional[str] = Field(None, max_length=255)
    contact_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=30)
    is_broker: bool = False
    equipment: Optional[str] = Field(None, max_length=100)
    cargo: Optional[str] = Field(None, max_length=255)
    weight: Optional[str] = Field(None, max_length=50)
    pallets: Optional[str] = Field(None, max_length=50)
    pickup_address: str = Field(..., min_length=1)
    pickup_date: Optional[str] = Field(None, max_length=50)
    pickup_time: Optional[str] = Field(None, max_length=50)
    delivery_address: Optional[str] = None
    delivery_date: Optional[str] = Field(None, max_length=50)
    delivery_time: Optional[str] = Field(None, max_length=50)
    reference_id: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class ContactRequestCreate(BaseModel):
    """Schema for the public contact form"""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    message: str = Field(..., min_length=1)


class SubmissionReceipt(BaseModel):
    success: bool = True
    id: str


class FreightRequestResponse(BaseModel):
    id: str
    company_name: Optional[str]
    contact_name: str
    email: str
    phone: str
    is_broker: bool
    equipment: Optional[str]
    cargo: Optional[str]
    weight: Optional[str]
    pallets: Optional[str]
    pickup_address: str
    pickup_date: Optional[str]
    pickup_time: Optional[str]
    delivery_address: Optional[str]
    delivery_date: Optional[str]
    delivery_time: Optional[str]
    reference_id: Optional[str]
    notes: Optional[str]
    applicant_ip: Optional[str]
    user_agent: Optional[str]
    created_at: datetime


class ContactRequestResponse(BaseModel):
    id: str
    name: str
    email: str
    message: str
    applicant_ip: Optional[str]
    user_agent: Optional[str]
    created_at: datetime


class FreightRequestPage(BaseModel):
    requests: List[FreightRequestResponse]
    pagination: Pagination


class ContactRequestPage(BaseModel):
    requests: List[ContactRequestResponse]
    pagination: Pagination
