"""Root conftest — shared database fixtures and environment defaults.

Invariants:
    - Every test gets a fresh file-backed SQLite database in tmp_path
    - Fixtures seed rows directly, bypassing the engine, so drifted states can be built

Design Decisions:
    - File-backed over in-memory SQLite: concurrent units of work need separate
      connections that see the same database
"""

import os

import pytest

# Ensure tests never reach a real database by accident
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("LOG_FORMAT", "text")

from yard.config import Settings  # noqa: E402
from yard.db.base import Base  # noqa: E402
from yard.infrastructure.database import DatabaseSessionManager  # noqa: E402
from yard.models.container import Container as ContainerModel  # noqa: E402
from yard.models.zone import Zone as ZoneModel  # noqa: E402
from yard.services.allocation_engine import AllocationEngine  # noqa: E402


class RecordingPublisher:
    """EventPublisher double that keeps every published event."""

    def __init__(self):
        self.events: list[tuple] = []

    def publish(self, event, payload):
        self.events.append((event, payload))

    def names(self) -> list[str]:
        return [e.value for e, _ in self.events]


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'yard.db'}",
        contention_retry_after_ms=100,
    )
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///unused.db",
        transaction_timeout_seconds=30.0,
        contention_retry_after_ms=100,
    )


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def allocation_engine(db_manager, publisher, test_settings) -> AllocationEngine:
    return AllocationEngine(db_manager, publisher, test_settings)


@pytest.fixture
def make_zone(db_manager):
    """Insert a zone row. current_load may be set to build drifted states."""
    async def _make(capacity: int = 1, name: str = "Z", current_load: int = 0):
        async with db_manager.transaction() as db:
            zone = ZoneModel(
                name=name, type="general",
                capacity=capacity, current_load=current_load,
            )
            db.add(zone)
            await db.flush()
            return zone
    return _make


@pytest.fixture
def make_container(db_manager):
    """Insert a container row with an arbitrary status/binding."""
    async def _make(status: str = "new", zone_id: int | None = None, number: str = "T-1"):
        async with db_manager.transaction() as db:
            container = ContainerModel(
                number=number, type="dry", status=status, zone_id=zone_id,
            )
            db.add(container)
            await db.flush()
            return container
    return _make


@pytest.fixture
def fetch_zone(db_manager):
    async def _fetch(zone_id: int) -> ZoneModel:
        async with db_manager.session() as db:
            return await db.get(ZoneModel, zone_id)
    return _fetch


@pytest.fixture
def fetch_container(db_manager):
    async def _fetch(container_id: int) -> ContainerModel:
        async with db_manager.session() as db:
            return await db.get(ContainerModel, container_id)
    return _fetch
