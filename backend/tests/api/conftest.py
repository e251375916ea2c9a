"""API test fixtures — FastAPI app over the per-test SQLite database.

Invariants:
    - db_manager and broadcaster singletons replaced for the duration of each test
    - ASGITransport does not run the lifespan, so no real database is touched
"""

import pytest
from httpx import ASGITransport, AsyncClient

import yard.infrastructure.database as db_module
import yard.infrastructure.event_broadcaster as broadcaster_module
from yard.config import get_settings
from yard.infrastructure.event_broadcaster import EventBroadcaster
from yard.main import app


@pytest.fixture
def broadcaster(monkeypatch):
    instance = EventBroadcaster()
    monkeypatch.setattr(broadcaster_module, "broadcaster", instance)
    return instance


@pytest.fixture
async def client(db_manager, broadcaster, test_settings, monkeypatch):
    """FastAPI test client bound to the test database."""
    monkeypatch.setattr(db_module, "db_manager", db_manager)
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
