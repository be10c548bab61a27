# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SEED_ON_STARTUP"] = "false"

from src.database import get_db
from src.main import app
from src.models import Role, User
from src.models.base import Base
from src.services import reconciliation_service
from src.services.menu_service import AccessCaches

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def auth_header(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {user.id}"}


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def caches(clock) -> AccessCaches:
    return AccessCaches.create(ttl_seconds=60, clock=clock)


@pytest.fixture(scope="function")
def client(db_session, caches):
    """Create a test client with database override and fresh caches."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.access_caches = caches
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db_session):
    """Seed default resource types, roles and template rules."""
    return reconciliation_service.seed_defaults(db_session)


def _role(db_session, name: str) -> Role:
    role = db_session.query(Role).filter(Role.name == name).first()
    if role is None:
        role = Role(name=name, display_name=name.title())
        db_session.add(role)
        db_session.flush()
    return role


def _user(db_session, email: str, role: str, group_id: int | None) -> User:
    user = User(email=email, role_id=_role(db_session, role).id, group_id=group_id)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session, seeded) -> User:
    """Create a user holding the admin role."""
    return _user(db_session, "admin@example.com", "admin", None)


@pytest.fixture
def test_user(db_session, seeded) -> User:
    """Create a regular user in group 7."""
    return _user(db_session, "test@example.com", "user", 7)


@pytest.fixture
def teammate(db_session, seeded) -> User:
    """Create a second regular user in the same group as test_user."""
    return _user(db_session, "teammate@example.com", "user", 7)


@pytest.fixture
def outsider(db_session, seeded) -> User:
    """Create a regular user in another group."""
    return _user(db_session, "outsider@example.com", "user", 8)


@pytest.fixture
def groupless_user(db_session, seeded) -> User:
    """Create a regular user that has not joined a group."""
    return _user(db_session, "solo@example.com", "user", None)


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    return auth_header(admin_user)


@pytest.fixture
def user_headers(test_user) -> dict[str, str]:
    return auth_header(test_user)


@pytest.fixture
def headers_for():
    """Build an Authorization header for any user."""
    return auth_header
