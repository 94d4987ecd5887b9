import pytest
from fastapi.testclient import TestClient

from taskmarket.main import app

from fakes import FakeRecordStore

ROUTER_MODULES = [
    "taskmarket.routers.tasks",
    "taskmarket.routers.comments",
    "taskmarket.routers.profiles",
    "taskmarket.routers.admin",
]


@pytest.fixture
def store(monkeypatch):
    """A fresh in-memory store wired into every router."""
    fake = FakeRecordStore()
    for module in ROUTER_MODULES:
        monkeypatch.setattr(f"{module}.get_record_store", lambda: fake)
    return fake


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def login(monkeypatch):
    """Authenticate subsequent requests as the given user; returns the auth headers."""

    def _login(user_id="owner", name=None, admin=False):
        claims = {"uid": user_id, "name": name or user_id.capitalize(), "email": f"{user_id}@example.com"}
        if admin:
            claims["admin"] = True
        monkeypatch.setattr("taskmarket.routers.auth.decode_access_token", lambda token: claims)
        return {"Authorization": "Bearer fake-token"}

    return _login
