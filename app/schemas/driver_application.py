"""Driver application schemas"""
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import Pagination

ApplicationStatus = Literal["NEW", "IN_REVIEW", "APPROVED", "REJECTED"]
ConsentType = Literal["AUTHORIZATION", "ALCOHOL_DRUG", "SAFETY_PERFORMANCE", "PSP", "CLEARINGHOUSE", "MVR"]


class PreviousAddress(BaseModel):
    address_line1: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2)
    zip: str = Field(..., min_length=5)
    from_date: Optional[str] = None
    to_date: Optional[str] = None


class DriverLicense(BaseModel):
    license_number: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2)
    license_class: str = Field(..., min_length=1, description="CDL class (A, B, C)")
    expires_at: date
    endorsements: Optional[str] = None
    has_other_licenses_last_3_years: bool
    other_licenses: Optional[Any] = None


class EmploymentRecord(BaseModel):
    employer_name: str = Field(..., min_length=1)
    employer_phone: Optional[str] = None
    employer_fax: Optional[str] = None
    employer_email: Optional[str] = None
    address_line1: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2)
    zip: str = Field(..., min_length=5)
    position_held: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    reason_for_leaving: Optional[str] = None
    equipment_class: Optional[str] = None
    was_subject_to_fmcsr: bool
    was_safety_sensitive: bool


class LegalConsent(BaseModel):
    type: ConsentType
    accepted: bool
    signed_at: Optional[str] = None
    form_version: Optional[str] = None


class DriverApplicationCreate(BaseModel):
    """Schema for the public driver application form"""

    # Identity
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date
    phone: str = Field(..., min_length=10, max_length=30)
    email: EmailStr

    # Address
    current_address_line1: str = Field(..., min_length=1, max_length=255)
    current_city: str = Field(..., min_length=1, max_length=100)
    current_state: str = Field(..., min_length=2, max_length=2)
    current_zip: str = Field(..., min_length=5, max_length=10)
    lived_at_current_more_than_3_years: bool
    previous_addresses: List[PreviousAddress] = Field(default_factory=list)

    # SSN (optional; dashes allowed)
    ssn: Optional[str] = Field(None, pattern=r"^$|^\d{3}-?\d{2}-?\d{4}$")

    # Driver type
    applicant_type: Optional[Literal["COMPANY_DRIVER", "OWNER_OPERATOR"]] = None
    truck_year: Optional[str] = Field(None, max_length=10)
    truck_make: Optional[str] = Field(None, max_length=100)
    alcohol_drug_return_to_duty: Optional[bool] = None

    license: DriverLicense
    # Free-form; an unparseable value is ignored rather than rejected
    medical_card_expires_at: Optional[str] = None
    employment_records: List[EmploymentRecord]
    legal_consents: List[LegalConsent]


class ApplicationReceipt(BaseModel):
    success: bool = True
    id: str
    message: str = "Application submitted successfully"


class ApplicationSummary(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    status: ApplicationStatus
    ssn_last4: str
    created_at: datetime


class ApplicationPage(BaseModel):
    applications: List[ApplicationSummary]
    pagination: Pagination


class ReviewerSummary(BaseModel):
    id: str
    email: str
    role: str


class ApplicationDetail(BaseModel):
    """Full application as shown to reviewers; the SSN is only ever masked here"""

    id: str
    first_name: str
    last_name: str
    date_of_birth: datetime
    phone: str
    email: str
    current_address_line1: str
    current_city: str
    current_state: str
    current_zip: str
    lived_at_current_more_than_3_years: bool
    ssn_last4: str
    ssn_masked: str
    has_ssn: bool
    applicant_type: Optional[str]
    truck_year: Optional[str]
    truck_make: Optional[str]
    alcohol_drug_return_to_duty: Optional[bool]
    medical_card_expires_at: Optional[datetime]
    license: Dict[str, Any]
    previous_addresses: List[Dict[str, Any]]
    employment_records: List[Dict[str, Any]]
    legal_consents: List[Dict[str, Any]]
    status: ApplicationStatus
    internal_notes: Optional[str]
    reviewed_by: Optional[ReviewerSummary]
    reviewed_at: Optional[datetime]
    applicant_ip: Optional[str]
    user_agent: Optional[str]
    created_at: datetime
    updated_at: datetime


class StatusUpdate(BaseModel):
    status: ApplicationStatus
    internal_notes: Optional[str] = None


class DecryptSSNRequest(BaseModel):
    password: str = Field(..., min_length=1, description="Caller's password, re-entered for step-up")


class DecryptSSNResponse(BaseModel):
    success: bool = True
    ssn: str
