"""Tests for role-gated access"""
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from app.api.deps import ROLE_ANY, require_role, role_satisfies
from app.database import get_db
from app.utils.auth import to_identity
from app.utils.jwt_utils import create_access_token


@pytest.mark.parametrize(
    "role,min_role,expected",
    [
        ("SUPER_ADMIN", "SUPER_ADMIN", True),
        ("SUPER_ADMIN", "VIEWER", True),
        ("MANAGER", "MANAGER", True),
        ("MANAGER", "SUPER_ADMIN", False),
        ("VIEWER", "MANAGER", False),
        ("VIEWER", ROLE_ANY, True),
        ("UNKNOWN", "VIEWER", False),
    ],
)
def test_role_hierarchy(role, min_role, expected):
    assert role_satisfies(role, min_role) is expected


def test_unknown_min_role_is_rejected():
    with pytest.raises(ValueError):
        require_role("OWNER")


def test_distinct_dependencies_per_role():
    assert require_role("MANAGER").__name__ != require_role("VIEWER").__name__


@pytest.mark.parametrize(
    "fixture_name,status_code",
    [("super_admin", 200), ("manager", 403), ("viewer", 403)],
)
def test_admin_user_listing_requires_super_admin(request, client, sign_in, fixture_name, status_code):
    sign_in(client, request.getfixturevalue(fixture_name))

    response = client.get("/api/admin/users")
    assert response.status_code == status_code
    if status_code == 403:
        assert response.json() == {"detail": "Insufficient permissions"}


@pytest.mark.parametrize(
    "fixture_name,status_code",
    [("super_admin", 200), ("manager", 200), ("viewer", 403)],
)
def test_fleet_requires_manager(request, client, sign_in, fixture_name, status_code):
    sign_in(client, request.getfixturevalue(fixture_name))

    assert client.get("/api/admin/trucks").status_code == status_code


def test_profile_is_open_to_any_role(client, sign_in, viewer):
    sign_in(client, viewer)

    response = client.patch("/api/admin/me", json={"name": "Night shift"})
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Night shift"


def test_role_is_read_from_database_not_token(client, db, manager):
    """A demoted admin loses access on the next request even with an old token"""
    client.cookies.set("token", create_access_token(to_identity(manager)))
    assert client.get("/api/admin/trucks").status_code == 200

    manager.role = "VIEWER"
    db.commit()
    assert client.get("/api/admin/trucks").status_code == 403


def test_promoted_admin_gains_access_with_old_token(client, db, viewer):
    client.cookies.set("token", create_access_token(to_identity(viewer)))
    assert client.get("/api/admin/applications").status_code == 403

    viewer.role = "MANAGER"
    db.commit()
    assert client.get("/api/admin/applications").status_code == 200


def test_require_role_resolves_identity_in_any_app(db, manager):
    probe = FastAPI()

    @probe.get("/whoami")
    def whoami(request_admin=Depends(require_role("VIEWER"))):
        return {"id": request_admin.id, "role": request_admin.role}

    probe.dependency_overrides[get_db] = lambda: db
    with TestClient(probe) as probe_client:
        probe_client.cookies.set("token", create_access_token(to_identity(manager)))
        response = probe_client.get("/whoami")

    assert response.status_code == 200
    assert response.json() == {"id": manager.id, "role": "MANAGER"}
