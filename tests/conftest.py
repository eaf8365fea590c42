from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from app.auth.verify import auth_dependency
from app.infrastructure.audit import audit_logger
from app.main import create_app
from app.models.domain.user_domain import NewUserFields, UserRecord
from app.services.users import UserService


class FakeClock:
    """Deterministic clock for UserService; advance() moves time forward."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def make_fields(**overrides) -> NewUserFields:
    data = {
        "first_name": "Alice",
        "last_name": "Anderson",
        "email": "alice@company.com",
        "phone_number": "+1-555-0100",
        "department": "IT",
        "position": "Engineer",
    }
    data.update(overrides)
    return NewUserFields(**data)


def make_record(**overrides) -> UserRecord:
    now = datetime(2024, 1, 1, tzinfo=UTC)
    data = {
        "first_name": "Alice",
        "last_name": "Anderson",
        "email": "alice@company.com",
        "department": "IT",
        "position": "Engineer",
        "date_created": now,
        "date_modified": now,
    }
    data.update(overrides)
    return UserRecord(**data)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(clock):
    return UserService(clock=clock)


@pytest.fixture
def auth_override():
    def _override():
        return {"sub": "user-123", "email": "tester@company.com"}

    return _override


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
def client(app, auth_override):
    """Client with auth bypassed and an empty user service."""
    app.dependency_overrides[auth_dependency] = auth_override
    with TestClient(app) as test_client:
        app.state.user_service = UserService()
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(app):
    """Client with real auth and the sample users loaded at startup."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(seeded_client):
    response = seeded_client.post(
        "/api/auth/login", json={"email": "admin@techhive.com", "password": "Admin123!"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def audit_entries():
    """Collect everything written to the global audit logger during a test."""
    entries: list[tuple[str, dict]] = []

    def _sink(kind: str, payload: dict) -> None:
        entries.append((kind, payload))

    audit_logger.add_sink(_sink)
    yield entries
    audit_logger.remove_sink(_sink)


@pytest.fixture
def fields_factory():
    return make_fields


@pytest.fixture
def record_factory():
    return make_record
