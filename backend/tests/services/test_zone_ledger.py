"""Zone Ledger — conditional load updates inside a unit of work."""

import pytest

from yard.core.errors import ZoneNotFoundError, ZoneOverloadedError
from yard.services.zone_ledger import ZoneLedger


async def test_increment_until_full(db_manager, make_zone, fetch_zone):
    zone = await make_zone(capacity=2)

    async with db_manager.transaction() as db:
        ledger = ZoneLedger(db)
        assert (await ledger.increment_load(zone.id)).current_load == 1
        assert (await ledger.increment_load(zone.id)).current_load == 2

    with pytest.raises(ZoneOverloadedError) as exc:
        async with db_manager.transaction() as db:
            await ZoneLedger(db).increment_load(zone.id)
    assert exc.value.capacity == 2
    assert (await fetch_zone(zone.id)).current_load == 2


async def test_increment_missing_zone(db_manager):
    with pytest.raises(ZoneNotFoundError):
        async with db_manager.transaction() as db:
            await ZoneLedger(db).increment_load(42)


async def test_decrement_floors_at_zero(db_manager, make_zone, fetch_zone):
    zone = await make_zone(capacity=2, current_load=1)

    async with db_manager.transaction() as db:
        ledger = ZoneLedger(db)
        assert (await ledger.decrement_load(zone.id)).current_load == 0
        assert (await ledger.decrement_load(zone.id)).current_load == 0

    assert (await fetch_zone(zone.id)).current_load == 0


async def test_capacity_never_written(db_manager, make_zone, fetch_zone):
    zone = await make_zone(capacity=3)
    async with db_manager.transaction() as db:
        await ZoneLedger(db).increment_load(zone.id)
    assert (await fetch_zone(zone.id)).capacity == 3


async def test_lock_returns_existing_zones_only(db_manager, make_zone):
    first = await make_zone(name="first")
    second = await make_zone(name="second")

    async with db_manager.transaction() as db:
        zones = await ZoneLedger(db).lock([second.id, first.id, 999])

    assert sorted(zones) == [first.id, second.id]


async def test_list_all_ordered(db_manager, make_zone):
    await make_zone(name="one")
    await make_zone(name="two")
    async with db_manager.session() as db:
        zones = await ZoneLedger(db).list_all()
    assert [z.name for z in zones] == ["one", "two"]
