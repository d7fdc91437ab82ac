"""Test fixtures for the task tracker."""

import hashlib
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from tracker.app import app
from tracker.config import settings
from tracker.database import get_store
from tracker.services import note_svc, person_svc, task_svc
from tracker.storage import JSONStore, SQLStore

API_KEY = "sk-test-0123456789abcdef"
BASIC_USER = "alice"
BASIC_PASSWORD = "alice-password"


class FakeClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture(name="sql_store")
def fixture_sql_store():
    store = SQLStore.in_memory()
    store.create_all()
    yield store
    store.close()


@pytest.fixture(name="json_store")
def fixture_json_store(tmp_path):
    store = JSONStore(tmp_path / "database")
    store.create_all()
    return store


@pytest.fixture(name="store", params=["sql", "json"])
def fixture_store(request):
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture(name="clock")
def fixture_clock(monkeypatch):
    clock = FakeClock(datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc))
    for module in (task_svc, note_svc, person_svc):
        monkeypatch.setattr(module, "_utcnow", clock)
    return clock


@pytest.fixture(name="auth_settings")
def fixture_auth_settings(monkeypatch):
    password_hash = hashlib.sha256(BASIC_PASSWORD.encode("utf-8")).hexdigest()
    monkeypatch.setattr(settings, "auth_enabled", True)
    monkeypatch.setattr(settings, "api_keys", f"{API_KEY}, sk-other-key")
    monkeypatch.setattr(settings, "basic_users", f"{BASIC_USER}:{password_hash}")
    monkeypatch.setattr(settings, "default_order", "created")
    return settings


@pytest.fixture(name="anon_client")
def fixture_anon_client(store, auth_settings):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(name="client")
def fixture_client(anon_client):
    anon_client.headers["X-API-Key"] = API_KEY
    return anon_client
