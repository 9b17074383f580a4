"""Tests for admin user management"""
from app.models.admin_user import AdminUser
from app.models.audit_log import AuditLog
from app.models.driver_application import DriverApplication
from app.models.refresh_token import RefreshToken
from app.utils.auth import authenticate, issue_refresh_token, verify_refresh_token

NEW_ADMIN = {"email": "New.Dispatcher@GlintLogistics.com", "password": "Fresh-Start-2025", "role": "MANAGER", "name": "Rita"}


def test_create_admin(client, db, sign_in, super_admin):
    """Test creating an admin stores a normalized email"""
    sign_in(client, super_admin)

    response = client.post("/api/admin/users", json=NEW_ADMIN)
    assert response.status_code == 201

    user = response.json()["user"]
    assert user["email"] == "new.dispatcher@glintlogistics.com"
    assert user["role"] == "MANAGER"
    assert "password_hash" not in user
    assert authenticate(db, "NEW.dispatcher@glintlogistics.com", "Fresh-Start-2025") is not None

    entry = db.query(AuditLog).filter(AuditLog.action == "CREATE_ADMIN").one()
    assert entry.resource_id == user["id"]
    assert entry.admin_id == super_admin.id


def test_create_admin_duplicate_email(client, sign_in, super_admin):
    sign_in(client, super_admin)
    client.post("/api/admin/users", json=NEW_ADMIN)

    response = client.post("/api/admin/users", json={**NEW_ADMIN, "email": "new.dispatcher@glintlogistics.com"})
    assert response.status_code == 409
    assert response.json() == {"detail": "An admin with this email already exists"}


def test_create_admin_weak_password(client, sign_in, super_admin):
    sign_in(client, super_admin)

    response = client.post("/api/admin/users", json={**NEW_ADMIN, "password": "alllowercase123!"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Password must contain at least one uppercase letter"}


def test_cannot_create_super_admin(client, sign_in, super_admin):
    sign_in(client, super_admin)

    response = client.post("/api/admin/users", json={**NEW_ADMIN, "role": "SUPER_ADMIN"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Cannot create SUPER_ADMIN via API"}


def test_list_admins(client, sign_in, super_admin, manager, viewer):
    sign_in(client, super_admin)

    users = client.get("/api/admin/users").json()["users"]
    assert {user["email"] for user in users} == {super_admin.email, manager.email, viewer.email}


def test_role_change_revokes_sessions(client, db, sign_in, super_admin, viewer):
    raw = issue_refresh_token(db, viewer.id)
    sign_in(client, super_admin)

    response = client.patch(f"/api/admin/users/{viewer.id}", json={"role": "MANAGER"})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "MANAGER"
    assert verify_refresh_token(db, raw) is None
    assert db.query(AuditLog).filter(AuditLog.action == "UPDATE_ADMIN").count() == 1


def test_name_change_keeps_sessions(client, db, sign_in, super_admin, viewer):
    raw = issue_refresh_token(db, viewer.id)
    sign_in(client, super_admin)

    response = client.patch(f"/api/admin/users/{viewer.id}", json={"name": "Temp"})
    assert response.json()["user"]["name"] == "Temp"
    assert verify_refresh_token(db, raw) is not None


def test_update_missing_admin(client, sign_in, super_admin):
    sign_in(client, super_admin)
    assert client.patch("/api/admin/users/missing", json={"role": "VIEWER"}).status_code == 404


def test_delete_admin_clears_reviewer_and_sessions(client, db, sign_in, super_admin, manager, sample_application):
    application_id = client.post("/api/driver-applications", json=sample_application).json()["id"]
    sign_in(client, manager)
    client.patch(f"/api/admin/applications/{application_id}/status", json={"status": "IN_REVIEW"})
    issue_refresh_token(db, manager.id)
    manager_id = manager.id

    sign_in(client, super_admin)
    response = client.delete(f"/api/admin/users/{manager_id}")
    assert response.status_code == 200

    db.expire_all()
    assert db.query(AdminUser).filter(AdminUser.id == manager_id).first() is None
    assert db.query(RefreshToken).filter(RefreshToken.admin_id == manager_id).count() == 0
    application = db.query(DriverApplication).filter(DriverApplication.id == application_id).one()
    assert application.reviewed_by_id is None
    assert application.status == "IN_REVIEW"
    assert db.query(AuditLog).filter(AuditLog.action == "DELETE_ADMIN").count() == 1


def test_delete_admin_clears_cached_reviewer(cached_client, sign_in, super_admin, manager, sample_application):
    application_id = cached_client.post("/api/driver-applications", json=sample_application).json()["id"]
    sign_in(cached_client, manager)
    cached_client.patch(f"/api/admin/applications/{application_id}/status", json={"status": "IN_REVIEW"})
    manager_id = manager.id

    sign_in(cached_client, super_admin)
    before = cached_client.get(f"/api/admin/applications/{application_id}").json()
    assert before["reviewed_by"]["id"] == manager_id

    assert cached_client.delete(f"/api/admin/users/{manager_id}").status_code == 200

    after = cached_client.get(f"/api/admin/applications/{application_id}").json()
    assert after["reviewed_by"] is None
    assert after["status"] == "IN_REVIEW"


def test_role_change_refreshes_cached_reviewer(cached_client, sign_in, super_admin, manager, sample_application):
    application_id = cached_client.post("/api/driver-applications", json=sample_application).json()["id"]
    sign_in(cached_client, manager)
    cached_client.patch(f"/api/admin/applications/{application_id}/status", json={"status": "APPROVED"})
    manager_id = manager.id

    sign_in(cached_client, super_admin)
    before = cached_client.get(f"/api/admin/applications/{application_id}").json()
    assert before["reviewed_by"]["role"] == "MANAGER"

    assert cached_client.patch(f"/api/admin/users/{manager_id}", json={"role": "VIEWER"}).status_code == 200

    after = cached_client.get(f"/api/admin/applications/{application_id}").json()
    assert after["reviewed_by"]["role"] == "VIEWER"


def test_cannot_delete_self(client, sign_in, super_admin):
    sign_in(client, super_admin)

    response = client.delete(f"/api/admin/users/{super_admin.id}")
    assert response.status_code == 400
    assert response.json() == {"detail": "You cannot delete your own account"}


def test_profile_password_change(client, db, sign_in, manager, admin_password):
    sign_in(client, manager)
    raw = issue_refresh_token(db, manager.id)

    response = client.patch("/api/admin/me", json={"new_password": "An0ther-Good-One"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Current password is required to set a new password"}

    response = client.patch(
        "/api/admin/me", json={"current_password": "Wr0ng-Password!!", "new_password": "An0ther-Good-One"}
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Current password is incorrect"}

    response = client.patch(
        "/api/admin/me", json={"current_password": admin_password, "new_password": "An0ther-Good-One"}
    )
    assert response.status_code == 200
    assert authenticate(db, manager.email, "An0ther-Good-One") is not None
    assert verify_refresh_token(db, raw) is None
    assert db.query(AuditLog).filter(AuditLog.action == "UPDATE_PROFILE").count() == 1


def test_profile_rejects_weak_new_password(client, sign_in, manager, admin_password):
    sign_in(client, manager)

    response = client.patch("/api/admin/me", json={"current_password": admin_password, "new_password": "short1!"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Password must be at least 12 characters long"}
