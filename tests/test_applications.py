"""Tests for driver application intake and review"""
from datetime import date

import pytest

from app.config import settings
from app.models.audit_log import AuditLog
from app.models.driver_application import DriverApplication
from app.utils.crypto import decrypt_field


@pytest.fixture
def submitted(client, sample_application) -> str:
    response = client.post("/api/driver-applications", json=sample_application)
    assert response.status_code == 201
    return response.json()["id"]


def test_submit_application(client, db, sample_application):
    """Test the public intake form"""
    response = client.post("/api/driver-applications", json=sample_application)
    assert response.status_code == 201

    data = response.json()
    assert data["success"] is True

    stored = db.query(DriverApplication).filter(DriverApplication.id == data["id"]).one()
    assert stored.ssn_last4 == "6789"
    assert stored.ssn_encrypted.count(":") == 2
    assert decrypt_field(stored.ssn_encrypted) == "123456789"
    assert stored.current_state == "IL"
    assert stored.status == "NEW"
    assert stored.license["license_class"] == "A"
    assert stored.applicant_ip == "testclient"


def test_submission_is_audited_anonymously(client, db, sample_application):
    response = client.post("/api/driver-applications", json=sample_application)

    entry = db.query(AuditLog).filter(AuditLog.action == "CREATE_APPLICATION").one()
    assert entry.resource_id == response.json()["id"]
    assert entry.admin_id is None


def test_submit_without_ssn(client, db, sample_application):
    sample_application["ssn"] = ""
    response = client.post("/api/driver-applications", json=sample_application)
    assert response.status_code == 201

    stored = db.query(DriverApplication).one()
    assert stored.ssn_encrypted == ""
    assert stored.ssn_last4 == ""


@pytest.mark.parametrize("ssn", ["12-345-6789", "12345678", "abc-de-fghi"])
def test_malformed_ssn_is_rejected(client, sample_application, ssn):
    sample_application["ssn"] = ssn
    response = client.post("/api/driver-applications", json=sample_application)
    assert response.status_code == 422


def test_license_expiry_too_far_out_is_rejected(client, sample_application):
    sample_application["license"]["expires_at"] = date(date.today().year + 60, 1, 1).isoformat()
    response = client.post("/api/driver-applications", json=sample_application)
    assert response.status_code == 400
    assert response.json()["detail"] == "License expiration date is too far in the future"


def test_invalid_date_of_birth_is_rejected(client, sample_application):
    sample_application["date_of_birth"] = "1985-02-30"
    response = client.post("/api/driver-applications", json=sample_application)
    assert response.status_code == 422


def test_unparseable_medical_card_date_is_ignored(client, db, sample_application):
    sample_application["medical_card_expires_at"] = "next spring"
    response = client.post("/api/driver-applications", json=sample_application)
    assert response.status_code == 201
    assert db.query(DriverApplication).one().medical_card_expires_at is None


def test_list_applications(client, sign_in, manager, submitted):
    sign_in(client, manager)

    response = client.get("/api/admin/applications")
    assert response.status_code == 200

    data = response.json()
    assert data["pagination"] == {"page": 1, "limit": 20, "total": 1, "total_pages": 1}
    assert data["applications"][0]["id"] == submitted
    assert data["applications"][0]["ssn_last4"] == "6789"
    assert "ssn_encrypted" not in data["applications"][0]


def test_list_filters_and_search(client, sign_in, manager, sample_application):
    client.post("/api/driver-applications", json=sample_application)
    sample_application["first_name"] = "Marco"
    sample_application["last_name"] = "Reyes"
    client.post("/api/driver-applications", json=sample_application)
    sign_in(client, manager)

    response = client.get("/api/admin/applications", params={"search": "reye"})
    assert [item["last_name"] for item in response.json()["applications"]] == ["Reyes"]

    response = client.get("/api/admin/applications", params={"status": "APPROVED"})
    assert response.json()["applications"] == []

    response = client.get("/api/admin/applications", params={"status": "BOGUS"})
    assert response.status_code == 422


def test_get_application_masks_ssn_and_is_audited(client, db, sign_in, manager, submitted):
    sign_in(client, manager)

    response = client.get(f"/api/admin/applications/{submitted}")
    assert response.status_code == 200

    data = response.json()
    assert data["ssn_masked"] == "****6789"
    assert data["has_ssn"] is True
    assert "ssn_encrypted" not in data
    assert "123-45-6789" not in response.text

    entry = db.query(AuditLog).filter(AuditLog.action == "VIEW_APPLICATION").one()
    assert entry.admin_id == manager.id
    assert entry.resource_id == submitted


def test_get_missing_application(client, sign_in, manager):
    sign_in(client, manager)
    response = client.get("/api/admin/applications/does-not-exist")
    assert response.status_code == 404
    assert response.json() == {"detail": "Application not found"}


def test_update_status_records_reviewer(client, db, sign_in, manager, submitted):
    sign_in(client, manager)

    response = client.patch(
        f"/api/admin/applications/{submitted}/status",
        json={"status": "APPROVED", "internal_notes": "Clean MVR"},
    )
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "APPROVED"
    assert data["internal_notes"] == "Clean MVR"
    assert data["reviewed_by"]["email"] == manager.email
    assert data["reviewed_at"] is not None
    assert db.query(AuditLog).filter(AuditLog.action == "UPDATE_STATUS").count() == 1


def test_decrypt_ssn_requires_password_step_up(client, db, sign_in, super_admin, admin_password, submitted):
    sign_in(client, super_admin)

    response = client.post(f"/api/admin/applications/{submitted}/decrypt-ssn", json={"password": admin_password})
    assert response.status_code == 200
    assert response.json() == {"success": True, "ssn": "123-45-6789"}
    assert db.query(AuditLog).filter(AuditLog.action == "DECRYPT_SSN").count() == 1

    response = client.post(f"/api/admin/applications/{submitted}/decrypt-ssn", json={"password": "Wr0ng-Password!!"})
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid password or insufficient permissions"}


def test_decrypt_ssn_is_super_admin_only(client, sign_in, manager, admin_password, submitted):
    sign_in(client, manager)
    response = client.post(f"/api/admin/applications/{submitted}/decrypt-ssn", json={"password": admin_password})
    assert response.status_code == 403


def test_decrypt_ssn_corrupt_envelope_fails_closed(client, db, sign_in, super_admin, admin_password, submitted):
    stored = db.query(DriverApplication).filter(DriverApplication.id == submitted).one()
    stored.ssn_encrypted = "garbage"
    db.commit()
    sign_in(client, super_admin)

    response = client.post(f"/api/admin/applications/{submitted}/decrypt-ssn", json={"password": admin_password})
    assert response.status_code == 401


def test_decrypt_ssn_without_key_is_a_server_error(client, sign_in, super_admin, admin_password, submitted, monkeypatch):
    monkeypatch.setattr(settings, "SSN_ENCRYPTION_KEY", "")
    sign_in(client, super_admin)

    response = client.post(f"/api/admin/applications/{submitted}/decrypt-ssn", json={"password": admin_password})
    assert response.status_code == 503
    assert response.json() == {"detail": "Service temporarily unavailable"}


def test_submission_with_ssn_needs_encryption_key(client, db, sample_application, monkeypatch):
    monkeypatch.setattr(settings, "SSN_ENCRYPTION_KEY", "")

    response = client.post("/api/driver-applications", json=sample_application)
    assert response.status_code == 503
    assert db.query(DriverApplication).count() == 0


def test_delete_application(client, db, sign_in, manager, submitted):
    sign_in(client, manager)

    response = client.delete(f"/api/admin/applications/{submitted}")
    assert response.status_code == 200
    assert db.query(DriverApplication).count() == 0
    assert client.get(f"/api/admin/applications/{submitted}").status_code == 404


def test_status_change_invalidates_cached_detail(cached_client, sign_in, manager, sample_application):
    application_id = cached_client.post("/api/driver-applications", json=sample_application).json()["id"]
    sign_in(cached_client, manager)

    assert cached_client.get(f"/api/admin/applications/{application_id}").json()["status"] == "NEW"
    assert cached_client.get("/api/admin/applications").json()["applications"][0]["status"] == "NEW"

    cached_client.patch(f"/api/admin/applications/{application_id}/status", json={"status": "IN_REVIEW"})

    assert cached_client.get(f"/api/admin/applications/{application_id}").json()["status"] == "IN_REVIEW"
    assert cached_client.get("/api/admin/applications").json()["applications"][0]["status"] == "IN_REVIEW"


def test_new_submission_invalidates_cached_list(cached_client, sign_in, manager, sample_application):
    sign_in(cached_client, manager)
    assert cached_client.get("/api/admin/applications").json()["pagination"]["total"] == 0

    cached_client.post("/api/driver-applications", json=sample_application)
    assert cached_client.get("/api/admin/applications").json()["pagination"]["total"] == 1
