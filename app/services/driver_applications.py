"""Public driver-application intake"""
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models.driver_application import DriverApplication
from app.schemas.driver_application import DriverApplicationCreate
from app.services.applications import invalidate_applications
from app.services.errors import ValidationFailedError
from app.utils.cache import CacheGate
from app.utils.crypto import encrypt_field
from app.utils.logger import logger

MAX_YEARS_AHEAD = 50


def _latest_allowed_date() -> date:
    today = date.today()
    try:
        return today.replace(year=today.year + MAX_YEARS_AHEAD)
    except ValueError:
        # Feb 29 -> Feb 28
        return today.replace(year=today.year + MAX_YEARS_AHEAD, day=28)


def _parse_optional_date(value: Optional[str], latest: date) -> Optional[datetime]:
    """Parse an ISO date or datetime; anything unparseable or out of range is dropped"""
    if not value or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    parsed = parsed.replace(tzinfo=None)
    if parsed.date() > latest:
        return None
    return parsed


def _as_datetime(value: date) -> datetime:
    return datetime(value.year, value.month, value.day)


def create_application(
    db: Session,
    cache: CacheGate,
    data: DriverApplicationCreate,
    applicant_ip: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> DriverApplication:
    """
    Store a submitted application

    The SSN, when given, is stripped of dashes, encrypted and only its last
    four digits are kept in clear.

    Raises:
        ValidationFailedError: SSN not 9 digits, license expiry too far out
        ConfigurationError: an SSN was submitted but no encryption key is configured
    """
    ssn_encrypted = ""
    ssn_last4 = ""
    if data.ssn and data.ssn.strip():
        ssn = data.ssn.replace("-", "").strip()
        if len(ssn) != 9 or not ssn.isdigit():
            raise ValidationFailedError("Invalid SSN format")
        ssn_encrypted = encrypt_field(ssn)
        ssn_last4 = ssn[-4:]

    latest = _latest_allowed_date()
    if data.license.expires_at > latest:
        raise ValidationFailedError("License expiration date is too far in the future")

    license_data = data.license.model_dump(mode="json")

    application = DriverApplication(
        first_name=data.first_name,
        last_name=data.last_name,
        date_of_birth=_as_datetime(data.date_of_birth),
        phone=data.phone,
        email=data.email,
        current_address_line1=data.current_address_line1,
        current_city=data.current_city,
        current_state=data.current_state.upper(),
        current_zip=data.current_zip,
        lived_at_current_more_than_3_years=data.lived_at_current_more_than_3_years,
        ssn_encrypted=ssn_encrypted,
        ssn_last4=ssn_last4,
        applicant_type=data.applicant_type,
        truck_year=data.truck_year or None,
        truck_make=data.truck_make or None,
        alcohol_drug_return_to_duty=data.alcohol_drug_return_to_duty,
        medical_card_expires_at=_parse_optional_date(data.medical_card_expires_at, latest),
        license=license_data,
        previous_addresses=[entry.model_dump(mode="json") for entry in data.previous_addresses],
        employment_records=[entry.model_dump(mode="json") for entry in data.employment_records],
        legal_consents=[entry.model_dump(mode="json") for entry in data.legal_consents],
        applicant_ip=applicant_ip,
        user_agent=user_agent,
    )
    db.add(application)
    db.commit()
    db.refresh(application)

    invalidate_applications(cache)

    logger.info(f"Driver application received: {application.id}", extra={"resource_id": application.id})
    return application
