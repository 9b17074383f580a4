"""Freight quote and contact request models"""
from sqlalchemy import Boolean, Column, DateTime, String, Text

from app.database import Base, generate_uuid_string, utcnow


class FreightRequest(Base):
    """FreightRequest model - quote request submitted from the public freight form"""

    __tablename__ = "freight_requests"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    company_name = Column(String(255), nullable=True)
    contact_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False)
    is_broker = Column(Boolean, default=False, nullable=False)
    equipment = Column(String(100), nullable=True)
    cargo = Column(String(255), nullable=True)
    weight = Column(String(50), nullable=True)
    pallets = Column(String(50), nullable=True)
    pickup_address = Column(Text, nullable=False)
    pickup_date = Column(String(50), nullable=True)
    pickup_time = Column(String(50), nullable=True)
    delivery_address = Column(Text, nullable=True)
    delivery_date = Column(String(50), nullable=True)
    delivery_time = Column(String(50), nullable=True)
    reference_id = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    applicant_ip = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)


class ContactRequest(Base):
    """ContactRequest model - message submitted from the public contact form"""

    __tablename__ = "contact_requests"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    applicant_ip = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
