"""Pytest configuration and fixtures"""
import fnmatch
import os
from typing import Dict, Generator, Optional

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-at-least-32-bytes-long")
os.environ.setdefault("SSN_ENCRYPTION_KEY", "MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY=")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("REDIS_URL", "")
os.environ.setdefault("FRONTEND_URL", "http://localhost:3000")

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.api.deps import get_cache
from app.database import Base, SessionLocal, engine, get_db
from app.main import app
from app.models.admin_user import AdminUser
from app.utils import passwords
from app.utils.auth import to_identity
from app.utils.cache import CacheGate
from app.utils.jwt_utils import create_access_token

FRONTEND_ORIGIN = "http://localhost:3000"
ADMIN_PASSWORD = "Corr3ct-Horse-Battery"


class FakeRedis:
    """In-memory stand-in for the handful of redis commands the cache uses"""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.down = False
        self.calls = 0

    def _check(self):
        self.calls += 1
        if self.down:
            raise redis.ConnectionError("connection refused")

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self._check()
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def scan_iter(self, match="*", count=None):
        self._check()
        return iter([key for key in list(self.store) if fnmatch.fnmatchcase(key, match)])

    def close(self):
        pass


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost keeps the suite fast"""
    monkeypatch.setattr(passwords, "BCRYPT_ROUNDS", 4)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache(fake_redis: FakeRedis) -> CacheGate:
    """A connected cache gate backed by the in-memory double"""
    gate = CacheGate(client=fake_redis)
    gate.connect()
    return gate


def _override_db(db: Session):
    def override_get_db():
        yield db
    return override_get_db


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Test client posing as the admin portal (allowed Origin header), cache disabled"""
    app.dependency_overrides[get_db] = _override_db(db)
    with TestClient(app, headers={"Origin": FRONTEND_ORIGIN}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def cached_client(db: Session, cache: CacheGate) -> Generator[TestClient, None, None]:
    """Same as ``client`` but with a working cache"""
    app.dependency_overrides[get_db] = _override_db(db)
    app.dependency_overrides[get_cache] = lambda: cache
    with TestClient(app, headers={"Origin": FRONTEND_ORIGIN}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_admin(db: Session, email: str, role: str, password: str = ADMIN_PASSWORD, name: Optional[str] = None) -> AdminUser:
    admin = AdminUser(email=email, password_hash=passwords.hash_password(password), role=role, name=name)
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@pytest.fixture
def admin_password() -> str:
    return ADMIN_PASSWORD


@pytest.fixture
def create_admin(db: Session):
    """Factory: create_admin(email, role, password=..., name=None)"""
    return lambda *args, **kwargs: _make_admin(db, *args, **kwargs)


@pytest.fixture
def sign_in():
    """Attach a valid access-token cookie for an admin: sign_in(client, admin)"""
    def _sign_in(test_client: TestClient, admin: AdminUser) -> None:
        test_client.cookies.set("token", create_access_token(to_identity(admin)))
    return _sign_in


@pytest.fixture
def super_admin(db: Session) -> AdminUser:
    return _make_admin(db, "owner@glintlogistics.com", "SUPER_ADMIN", name="Owner")


@pytest.fixture
def manager(db: Session) -> AdminUser:
    return _make_admin(db, "dispatch@glintlogistics.com", "MANAGER", name="Dispatch")


@pytest.fixture
def viewer(db: Session) -> AdminUser:
    return _make_admin(db, "intern@glintlogistics.com", "VIEWER")


@pytest.fixture
def sample_application() -> dict:
    """A complete driver application as the public form submits it"""
    return {
        "first_name": "Dana",
        "last_name": "Whitfield",
        "date_of_birth": "1985-04-12",
        "phone": "5551234567",
        "email": "dana@example.com",
        "current_address_line1": "12 Depot Rd",
        "current_city": "Joliet",
        "current_state": "il",
        "current_zip": "60431",
        "lived_at_current_more_than_3_years": True,
        "ssn": "123-45-6789",
        "applicant_type": "COMPANY_DRIVER",
        "license": {
            "license_number": "D1234567",
            "state": "IL",
            "license_class": "A",
            "expires_at": "2030-06-30",
            "has_other_licenses_last_3_years": False,
        },
        "medical_card_expires_at": "2027-01-15",
        "employment_records": [
            {
                "employer_name": "Prairie Freight",
                "address_line1": "400 Industrial Pkwy",
                "city": "Aurora",
                "state": "IL",
                "zip": "60502",
                "position_held": "OTR driver",
                "was_subject_to_fmcsr": True,
                "was_safety_sensitive": True,
            }
        ],
        "legal_consents": [
            {"type": "AUTHORIZATION", "accepted": True, "signed_at": "2025-03-01T10:00:00Z"},
            {"type": "PSP", "accepted": True},
        ],
    }
