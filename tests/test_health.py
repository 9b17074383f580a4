"""Tests for health endpoints"""


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"]["state"] == "disabled"


def test_readiness_check(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["database"] is True


def test_liveness_check(client):
    assert client.get("/health/live").json()["status"] == "alive"


def test_root(client):
    assert client.get("/").json()["status"] == "operational"
