"""
Pytest configuration and fixtures for testing.
"""
import os

# Keep the app's own engine off Postgres and the vendors switched off
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("FIREBASE_ENABLED", "false")
os.environ.setdefault("MAINTENANCE_SCHEDULER_ENABLED", "false")

import pytest
from unittest.mock import Mock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import alcozero.models  # noqa: F401
from alcozero.core.permissions import permissions_for_role
from alcozero.crud.user_settings import user_settings_crud
from alcozero.database.session import Base, get_db
from alcozero.firebase.device_status import DeviceStatusStore
from alcozero.models.admin import Admin
from alcozero.services.telemetry_service import telemetry_service
from common_utils.auth.utils import hash_password, create_access_token
from main import app


# Test database URL - using in-memory SQLite for tests
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="function")
def test_db():
    """
    Create a fresh test database for each test function.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(test_db):
    """
    Test client bound to the per-test database.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_admin(db, email, role="admin", name="Test Admin", password=TEST_PASSWORD):
    admin = Admin(
        name=name,
        email=email,
        password=hash_password(password),
        organization="AlcoZero Labs",
        phone="+10000000000",
        role=role,
        is_active=True,
    )
    db.add(admin)
    db.flush()
    user_settings_crud.get_or_create(db, admin_id=admin.admin_id)
    db.commit()
    db.refresh(admin)
    return admin


def bearer_for(admin):
    token = create_access_token(
        user_id=str(admin.admin_id),
        user_type="admin",
        custom_claims={
            "email": admin.email,
            "role": admin.role,
            "permissions": permissions_for_role(admin.role),
        },
    )
    return f"Bearer {token}"


@pytest.fixture
def test_admin(test_db):
    return make_admin(test_db, "admin@alcozero.com")


@pytest.fixture
def admin_token(test_admin):
    return bearer_for(test_admin)


@pytest.fixture
def operator_user(test_db):
    return make_admin(test_db, "operator@alcozero.com", role="operator", name="Fleet Operator")


@pytest.fixture
def operator_token(operator_user):
    return bearer_for(operator_user)


@pytest.fixture
def viewer_user(test_db):
    return make_admin(test_db, "viewer@alcozero.com", role="viewer", name="Read Only")


@pytest.fixture
def viewer_token(viewer_user):
    return bearer_for(viewer_user)


class FakeReference:
    """Stand-in for a firebase_admin.db.Reference backed by a dict of nodes"""

    def __init__(self, nodes, path):
        self.nodes = nodes
        self.path = path

    def get(self):
        node = self.nodes.get(self.path)
        return dict(node) if node is not None else None

    def update(self, values):
        self.nodes.setdefault(self.path, {}).update(values)


@pytest.fixture
def fake_rtdb(monkeypatch):
    """
    Route every live status read and write into a dict keyed by node path,
    e.g. ``fake_rtdb["deviceStatus/Car123"]``.
    """
    nodes = {}
    monkeypatch.setattr(DeviceStatusStore, "_get_reference", lambda self, path: FakeReference(nodes, path))
    return nodes


@pytest.fixture
def notifier(monkeypatch):
    """Capture alert and engine-lock notifications instead of sending them"""
    mock = Mock()
    monkeypatch.setattr(telemetry_service, "_notifier", mock)
    return mock
