"""Tests for truck and oil-change tracking endpoints"""
import pytest

from app.models.audit_log import AuditLog
from app.services.trucks import oil_change_status


@pytest.fixture
def fleet_client(client, sign_in, manager):
    sign_in(client, manager)
    return client


def create_truck(client, **overrides):
    payload = {"name": "T-101", "current_miles": 100000, "expires_in_miles": 12000}
    payload.update(overrides)
    return client.post("/api/admin/trucks", json=payload)


@pytest.mark.parametrize(
    "miles,status",
    [(30000, "Good"), (5001, "Good"), (5000, "Soon"), (1, "Soon"), (0, "Overdue")],
)
def test_oil_change_status_thresholds(miles, status):
    assert oil_change_status(miles) == status


def test_create_truck_backfills_last_oil_change(fleet_client, db):
    """Test expires_in_miles: last = current + expires_in - interval"""
    response = create_truck(fleet_client)
    assert response.status_code == 201

    truck = response.json()
    assert truck["last_oil_change_miles"] == 82000
    assert truck["miles_since_last_oil_change"] == 18000
    assert truck["miles_until_next_oil_change"] == 12000
    assert truck["status"] == "Good"
    assert truck["oil_change_interval_miles"] == 30000

    entry = db.query(AuditLog).filter(AuditLog.action == "CREATE_TRUCK").one()
    assert entry.resource_id == truck["id"]


def test_create_truck_without_history_starts_fresh(fleet_client):
    truck = create_truck(fleet_client, expires_in_miles=None).json()
    assert truck["last_oil_change_miles"] is None
    assert truck["miles_until_next_oil_change"] == 30000


def test_overdue_truck(fleet_client):
    truck = create_truck(fleet_client, expires_in_miles=-500).json()
    assert truck["miles_until_next_oil_change"] == 0
    assert truck["status"] == "Overdue"


def test_duplicate_name_is_rejected(fleet_client):
    create_truck(fleet_client)
    response = create_truck(fleet_client)
    assert response.status_code == 400
    assert response.json() == {"detail": "Truck with this name already exists"}


def test_list_trucks_ordered_by_name(fleet_client):
    create_truck(fleet_client, name="T-200")
    create_truck(fleet_client, name="T-050")

    response = fleet_client.get("/api/admin/trucks")
    assert response.status_code == 200
    assert [truck["name"] for truck in response.json()["trucks"]] == ["T-050", "T-200"]


def test_get_truck(fleet_client):
    truck_id = create_truck(fleet_client).json()["id"]

    assert fleet_client.get(f"/api/admin/trucks/{truck_id}").json()["name"] == "T-101"

    response = fleet_client.get("/api/admin/trucks/missing")
    assert response.status_code == 404
    assert response.json() == {"detail": "Truck not found"}


def test_update_truck_mileage(fleet_client, db):
    truck_id = create_truck(fleet_client).json()["id"]

    response = fleet_client.patch(f"/api/admin/trucks/{truck_id}", json={"current_miles": 109000})
    assert response.status_code == 200

    truck = response.json()
    assert truck["name"] == "T-101"
    assert truck["miles_until_next_oil_change"] == 3000
    assert truck["status"] == "Soon"
    assert db.query(AuditLog).filter(AuditLog.action == "UPDATE_TRUCK").count() == 1


def test_rename_to_existing_name_is_rejected(fleet_client):
    create_truck(fleet_client, name="T-200")
    truck_id = create_truck(fleet_client).json()["id"]

    response = fleet_client.patch(f"/api/admin/trucks/{truck_id}", json={"name": "T-200"})
    assert response.status_code == 400


def test_reset_oil_change(fleet_client, db):
    truck_id = create_truck(fleet_client, expires_in_miles=100).json()["id"]

    response = fleet_client.post(f"/api/admin/trucks/{truck_id}/oil/reset")
    assert response.status_code == 200

    truck = response.json()
    assert truck["last_oil_change_miles"] == 100000
    assert truck["last_oil_change_at"] is not None
    assert truck["miles_until_next_oil_change"] == 30000
    assert truck["status"] == "Good"
    assert db.query(AuditLog).filter(AuditLog.action == "RESET_OIL_CHANGE").count() == 1


def test_delete_truck(fleet_client, db):
    truck_id = create_truck(fleet_client).json()["id"]

    response = fleet_client.delete(f"/api/admin/trucks/{truck_id}")
    assert response.status_code == 200
    assert fleet_client.get(f"/api/admin/trucks/{truck_id}").status_code == 404
    assert db.query(AuditLog).filter(AuditLog.action == "DELETE_TRUCK").count() == 1


def test_cached_list_sees_mutations(cached_client, sign_in, manager, fake_redis):
    sign_in(cached_client, manager)
    assert cached_client.get("/api/admin/trucks").json() == {"trucks": []}
    assert any(key.startswith("trucks:list") for key in fake_redis.store)

    truck_id = create_truck(cached_client).json()["id"]
    assert len(cached_client.get("/api/admin/trucks").json()["trucks"]) == 1

    cached_client.get(f"/api/admin/trucks/{truck_id}")
    cached_client.post(f"/api/admin/trucks/{truck_id}/oil/reset")
    detail = cached_client.get(f"/api/admin/trucks/{truck_id}").json()
    assert detail["last_oil_change_miles"] == 100000
