import pytest
from fastapi.testclient import TestClient

from clock import FixedClock
from event_store import JsonEventStore
from main import create_app
from settings import Settings

NOW = "2025-08-02T10:00:00.000Z"


class MemoryStore:
    """In-memory VisitStore/ActionStore for service tests."""

    def __init__(self, visits=None, actions=None):
        self.visits = list(visits or [])
        self.actions = list(actions or [])

    def record_visit(self, visit):
        self.visits.append(visit)

    def get_all_visits(self):
        return list(self.visits)

    def record_action(self, action):
        self.actions.append(action)

    def get_all_actions(self):
        return list(self.actions)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "data" / "storage.json"


@pytest.fixture
def store(storage_path):
    return JsonEventStore(str(storage_path))


@pytest.fixture
def app_settings(tmp_path, storage_path):
    return Settings(
        storage_path=str(storage_path),
        geoip_db_path=str(tmp_path / "missing.mmdb"),
        log_level="DEBUG",
        max_actions_limit=100,
    )


@pytest.fixture
def client(app_settings, clock):
    return TestClient(create_app(app_settings, clock=clock))
