import os

# Settings are read at import time; provide test values before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-timekeeper")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from timekeeper.database import get_db
from timekeeper.models.base import Base
from timekeeper.config import settings
from timekeeper.core.security import create_access_token, hash_password
# Import all model classes to ensure they're registered with SQLAlchemy
from timekeeper.models.tenant import Tenant
from timekeeper.models.user import User
from timekeeper.models.role import UserRole
from timekeeper.models.department import Department  # noqa: F401
from timekeeper.models.project import Project, ProjectAssignment  # noqa: F401
from timekeeper.models.task import Task
from timekeeper.models.timesheet import Timesheet, TimesheetEntry  # noqa: F401
from timekeeper.models.audit_log import AuditLog  # noqa: F401
from timekeeper.models.revoked_token import RevokedToken  # noqa: F401
# Import FastAPI app AFTER model imports
from timekeeper.main import app

TEST_PASSWORD = "password123"

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_tenant(db, slug: str, name: str | None = None, **kwargs) -> Tenant:
    """Insert a tenant directly"""
    tenant = Tenant(name=name or slug.title(), slug=slug, **kwargs)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    return tenant


def make_user(db, tenant: Tenant, username: str, role: UserRole = UserRole.USER, **kwargs) -> User:
    """Insert a user directly with the shared test password"""
    kwargs.setdefault("email", f"{username}@{tenant.slug}.example.com")
    kwargs.setdefault("first_name", username.title())
    kwargs.setdefault("last_name", "Tester")
    user = User(
        tenant_id=tenant.id,
        username=username,
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        **kwargs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_test_token(user: User, expired: bool = False) -> str:
    """
    Generate an access token for a test user.

    Args:
        user: User to embed in 'sub'/'tid'
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    delta = timedelta(minutes=-5) if expired else timedelta(minutes=15)
    return create_access_token(user.id, user.tenant_id, user.role.value, expires_delta=delta)


def headers_for(user: User, tenant_slug: str | None = None) -> dict:
    """Authorization headers for a user, optionally addressing a tenant"""
    headers = {"Authorization": f"Bearer {create_test_token(user)}"}
    if tenant_slug:
        headers["X-Tenant-Slug"] = tenant_slug
    return headers


def raw_token(payload: dict, key: str | None = None) -> str:
    """Encode arbitrary claims, for malformed-token tests"""
    return jwt.encode(payload, key or settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def acme(db_session):
    return make_tenant(db_session, "acme", "Acme Corp", domain="time.acme.test", subdomain="acme")


@pytest.fixture
def beta(db_session):
    return make_tenant(db_session, "beta", "Beta Ltd")


@pytest.fixture
def alice(db_session, acme):
    """Employee in acme"""
    return make_user(db_session, acme, "alice", UserRole.USER)


@pytest.fixture
def bob(db_session, acme):
    """Manager in acme"""
    return make_user(db_session, acme, "bob", UserRole.MANAGER)


@pytest.fixture
def carol(db_session, acme):
    """Admin in acme"""
    return make_user(db_session, acme, "carol", UserRole.ADMIN)


@pytest.fixture
def olivia(db_session, acme):
    """Owner of acme"""
    return make_user(db_session, acme, "olivia", UserRole.OWNER)


@pytest.fixture
def eve(db_session, beta):
    """Employee in beta"""
    return make_user(db_session, beta, "eve", UserRole.USER)


@pytest.fixture
def victor(db_session, beta):
    """Manager in beta"""
    return make_user(db_session, beta, "victor", UserRole.MANAGER)


@pytest.fixture
def alice_headers(alice):
    return headers_for(alice)


@pytest.fixture
def bob_headers(bob):
    return headers_for(bob)


@pytest.fixture
def carol_headers(carol):
    return headers_for(carol)


@pytest.fixture
def olivia_headers(olivia):
    return headers_for(olivia)


@pytest.fixture
def eve_headers(eve):
    return headers_for(eve)


@pytest.fixture
def victor_headers(victor):
    return headers_for(victor)


@pytest.fixture
def acme_project(client, bob_headers):
    """Project in acme created through the API by bob"""
    response = client.post("/api/projects", headers=bob_headers, json={"name": "Website Redesign"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def beta_project(client, victor_headers):
    """Project in beta created through the API by victor"""
    response = client.post("/api/projects", headers=victor_headers, json={"name": "Beta Launch"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def acme_task(db_session, acme, acme_project):
    task = Task(tenant_id=acme.id, project_id=acme_project["id"], name="Design mockups")
    db_session.add(task)
    db_session.commit()
    db_session.refresh(task)
    return task


def week_of(client, headers: dict, day: str = "2024-01-01") -> dict:
    """Open (or create) the caller's timesheet for the week containing ``day``"""
    response = client.get(f"/api/timesheets/week/{day}", headers=headers)
    assert response.status_code == 200
    return response.json()


def add_entry(client, headers: dict, timesheet_id: int, project_id: int, **hours) -> dict:
    """Add an entry through the API; hours are given as monday=8, ..."""
    payload = {"timesheet_id": timesheet_id, "project_id": project_id}
    payload.update({f"{day}_hours": value for day, value in hours.items()})
    response = client.post("/api/timesheet-entries", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


FULL_WEEK = {"monday": 8, "tuesday": 8, "wednesday": 8, "thursday": 8, "friday": 8}
