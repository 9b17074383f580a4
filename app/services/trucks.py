"""Fleet trucks and oil-change tracking"""
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import utcnow
from app.models.truck import DEFAULT_OIL_CHANGE_INTERVAL_MILES, Truck
from app.services.errors import NotFoundError, ValidationFailedError
from app.utils.cache import CacheGate, cache_key

CACHE_NAMESPACE = "trucks"
LIST_TTL = 60
SOON_THRESHOLD_MILES = 5000


def oil_change_status(miles_until_next: int) -> str:
    """Good above 5000 miles remaining, Soon from 1 to 5000, Overdue at 0"""
    if miles_until_next > SOON_THRESHOLD_MILES:
        return "Good"
    if miles_until_next > 0:
        return "Soon"
    return "Overdue"


def with_oil_status(truck: Truck) -> Dict[str, Any]:
    """Serialize a truck together with its derived oil-change fields"""
    last = truck.last_oil_change_miles if truck.last_oil_change_miles is not None else truck.current_miles
    since = max(0, truck.current_miles - last)
    until = max(0, truck.oil_change_interval_miles - since)
    return jsonable_encoder({
        "id": truck.id,
        "name": truck.name,
        "samsara_vehicle_id": truck.samsara_vehicle_id,
        "current_miles": truck.current_miles,
        "current_miles_updated_at": truck.current_miles_updated_at,
        "last_oil_change_miles": truck.last_oil_change_miles,
        "last_oil_change_at": truck.last_oil_change_at,
        "oil_change_interval_miles": truck.oil_change_interval_miles,
        "miles_since_last_oil_change": since,
        "miles_until_next_oil_change": until,
        "status": oil_change_status(until),
        "created_at": truck.created_at,
        "updated_at": truck.updated_at,
    })


def invalidate_trucks(cache: CacheGate, truck_id: Optional[str] = None) -> None:
    if truck_id:
        cache.delete_key(cache_key(f"{CACHE_NAMESPACE}:detail", id=truck_id))
    cache.invalidate(f"{CACHE_NAMESPACE}:*")


def _get_or_404(db: Session, truck_id: str) -> Truck:
    truck = db.query(Truck).filter(Truck.id == truck_id).first()
    if truck is None:
        raise NotFoundError("Truck not found")
    return truck


def _commit_unique_name(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailedError("Truck with this name already exists")


def list_trucks(db: Session, cache: CacheGate) -> Dict[str, Any]:
    """All trucks ordered by name"""
    def fetch() -> Dict[str, Any]:
        trucks = db.query(Truck).order_by(Truck.name.asc()).all()
        return {"trucks": [with_oil_status(truck) for truck in trucks]}

    return cache.get_cached(cache_key(f"{CACHE_NAMESPACE}:list"), fetch, LIST_TTL)


def get_truck(db: Session, cache: CacheGate, truck_id: str) -> Dict[str, Any]:
    return cache.get_cached(
        cache_key(f"{CACHE_NAMESPACE}:detail", id=truck_id),
        lambda: with_oil_status(_get_or_404(db, truck_id)),
        LIST_TTL,
    )


def create_truck(
    db: Session,
    cache: CacheGate,
    name: str,
    samsara_vehicle_id: Optional[str] = None,
    current_miles: int = 0,
    expires_in_miles: Optional[int] = None,
    oil_change_interval_miles: int = DEFAULT_OIL_CHANGE_INTERVAL_MILES,
) -> Dict[str, Any]:
    """
    Add a truck

    ``expires_in_miles`` (miles left until the next change) back-fills the
    odometer reading of the last change:
    ``last = current + expires_in - interval``.
    """
    last_oil_change_miles = None
    if expires_in_miles is not None:
        last_oil_change_miles = current_miles + expires_in_miles - oil_change_interval_miles

    if db.query(Truck).filter(Truck.name == name).first():
        raise ValidationFailedError("Truck with this name already exists")

    truck = Truck(
        name=name,
        samsara_vehicle_id=samsara_vehicle_id or None,
        current_miles=current_miles,
        current_miles_updated_at=utcnow(),
        last_oil_change_miles=last_oil_change_miles,
        oil_change_interval_miles=oil_change_interval_miles,
    )
    db.add(truck)
    _commit_unique_name(db)
    db.refresh(truck)

    invalidate_trucks(cache)
    return with_oil_status(truck)


def update_truck(db: Session, cache: CacheGate, truck_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Apply a partial update (name, samsara_vehicle_id, current_miles, oil_change_interval_miles)"""
    truck = _get_or_404(db, truck_id)

    for field in ("name", "oil_change_interval_miles"):
        if changes.get(field) is not None:
            setattr(truck, field, changes[field])
    if "samsara_vehicle_id" in changes:
        truck.samsara_vehicle_id = changes["samsara_vehicle_id"] or None
    if changes.get("current_miles") is not None:
        truck.current_miles = changes["current_miles"]
        truck.current_miles_updated_at = utcnow()

    _commit_unique_name(db)
    db.refresh(truck)

    invalidate_trucks(cache, truck_id)
    return with_oil_status(truck)


def reset_oil_change(db: Session, cache: CacheGate, truck_id: str) -> Dict[str, Any]:
    """Record an oil change at the current odometer reading"""
    truck = _get_or_404(db, truck_id)
    truck.last_oil_change_miles = truck.current_miles
    truck.last_oil_change_at = utcnow()
    db.commit()
    db.refresh(truck)

    invalidate_trucks(cache, truck_id)
    return with_oil_status(truck)


def delete_truck(db: Session, cache: CacheGate, truck_id: str) -> None:
    truck = _get_or_404(db, truck_id)
    db.delete(truck)
    db.commit()

    invalidate_trucks(cache, truck_id)
