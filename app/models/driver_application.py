"""DriverApplication model"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import relationship

from app.database import Base, generate_uuid_string, utcnow

APPLICATION_STATUSES = ("NEW", "IN_REVIEW", "APPROVED", "REJECTED")


class DriverApplication(Base):
    """A driver employment application submitted from the public site.

    The SSN is never stored in clear: ``ssn_encrypted`` holds an AES-GCM
    envelope (see ``app.utils.crypto``) and ``ssn_last4`` is kept for display.
    License, address history, employment history and consents are stored as
    JSON documents in the shape the intake form submits them.
    """

    __tablename__ = "driver_applications"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)

    # Identity
    first_name = Column(String(100), nullable=False, index=True)
    last_name = Column(String(100), nullable=False, index=True)
    date_of_birth = Column(DateTime, nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(255), nullable=False)

    # Current address
    current_address_line1 = Column(String(255), nullable=False)
    current_city = Column(String(100), nullable=False)
    current_state = Column(String(2), nullable=False)
    current_zip = Column(String(10), nullable=False)
    lived_at_current_more_than_3_years = Column(Boolean, default=False, nullable=False)

    # Sensitive
    ssn_encrypted = Column(Text, default="", nullable=False)
    ssn_last4 = Column(String(4), default="", nullable=False)

    # Driver type
    applicant_type = Column(String(20), nullable=True)   # COMPANY_DRIVER | OWNER_OPERATOR
    truck_year = Column(String(10), nullable=True)
    truck_make = Column(String(100), nullable=True)
    alcohol_drug_return_to_duty = Column(Boolean, nullable=True)
    medical_card_expires_at = Column(DateTime, nullable=True)

    # Nested form sections
    license = Column(JSON, nullable=False)
    previous_addresses = Column(JSON, default=list, nullable=False)
    employment_records = Column(JSON, default=list, nullable=False)
    legal_consents = Column(JSON, default=list, nullable=False)

    # Review
    status = Column(String(20), default="NEW", nullable=False, index=True)
    internal_notes = Column(Text, nullable=True)
    reviewed_by_id = Column(String(36), ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    # Submission metadata
    applicant_ip = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    reviewed_by = relationship("AdminUser")
