"""Contention — bounded units of work fail fast and leave no partial effect."""

import asyncio

import pytest

from yard.config import Settings
from yard.core.errors import ContentionError
from yard.services.allocation_engine import AllocationEngine
from yard.services.zone_ledger import ZoneLedger


async def test_slow_unit_of_work_times_out_and_rolls_back(
    db_manager, publisher, make_zone, make_container, fetch_zone,
    fetch_container, monkeypatch,
):
    settings = Settings(
        database_url="sqlite+aiosqlite:///unused.db",
        transaction_timeout_seconds=0.05,
        contention_retry_after_ms=750,
    )
    engine = AllocationEngine(db_manager, publisher, settings)
    zone = await make_zone(capacity=1)
    container = await make_container()

    original = ZoneLedger.increment_load

    async def slow_increment(self, zone_id):
        zone_row = await original(self, zone_id)
        await asyncio.sleep(1)
        return zone_row

    monkeypatch.setattr(ZoneLedger, "increment_load", slow_increment)

    with pytest.raises(ContentionError) as exc:
        await engine.assign(container.id, zone.id)

    assert exc.value.retryable
    assert exc.value.context.retry_after_ms == 750
    assert (await fetch_zone(zone.id)).current_load == 0
    assert (await fetch_container(container.id)).status == "new"
    assert publisher.events == []


async def test_retry_after_contention_succeeds(
    db_manager, publisher, make_zone, make_container, fetch_zone, monkeypatch,
):
    settings = Settings(
        database_url="sqlite+aiosqlite:///unused.db",
        transaction_timeout_seconds=0.05,
    )
    engine = AllocationEngine(db_manager, publisher, settings)
    zone = await make_zone(capacity=1)
    container = await make_container()

    original = ZoneLedger.increment_load
    calls = {"n": 0}

    async def slow_once(self, zone_id):
        calls["n"] += 1
        zone_row = await original(self, zone_id)
        if calls["n"] == 1:
            await asyncio.sleep(1)
        return zone_row

    monkeypatch.setattr(ZoneLedger, "increment_load", slow_once)

    with pytest.raises(ContentionError):
        await engine.assign(container.id, zone.id)
    result = await engine.assign(container.id, zone.id)

    assert result.zone.current_load == 1
    assert (await fetch_zone(zone.id)).current_load == 1
