"""Truck model"""
from sqlalchemy import Column, DateTime, Integer, String

from app.database import Base, generate_uuid_string, utcnow

DEFAULT_OIL_CHANGE_INTERVAL_MILES = 30000


class Truck(Base):
    """A fleet truck tracked for oil-change service.

    Mileage since the last oil change and the Good/Soon/Overdue status are
    derived at read time by ``app.services.trucks``; only raw odometer values
    are stored.
    """

    __tablename__ = "trucks"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    name = Column(String(100), unique=True, nullable=False, index=True)
    samsara_vehicle_id = Column(String(64), nullable=True, index=True)
    current_miles = Column(Integer, default=0, nullable=False)
    current_miles_updated_at = Column(DateTime, nullable=True)
    last_oil_change_miles = Column(Integer, nullable=True)
    last_oil_change_at = Column(DateTime, nullable=True)
    oil_change_interval_miles = Column(Integer, default=DEFAULT_OIL_CHANGE_INTERVAL_MILES, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
