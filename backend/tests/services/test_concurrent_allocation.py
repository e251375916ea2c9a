"""Concurrent Allocation — capacity holds when many units of work race.

Tests cover:
    - 50 concurrent assigns into a zone of capacity 10: exactly 10 succeed
    - Ships racing assigns never overcommit and keep loads in step with bindings
    - Opposite-direction reassignments complete without deadlock
"""

import asyncio

from yard.core.errors import ContentionError, ZoneOverloadedError


async def _with_retry(operation, *args, attempts: int = 20):
    """Callers may retry ContentionError: failed attempts have no effect."""
    for _ in range(attempts - 1):
        try:
            return await operation(*args)
        except ContentionError as e:
            await asyncio.sleep(e.context.retry_after_ms / 1000)
    return await operation(*args)


async def _outcome(operation, *args) -> str:
    try:
        await _with_retry(operation, *args)
        return "ok"
    except ZoneOverloadedError:
        return "overloaded"


async def test_fifty_concurrent_assigns_fill_exactly_ten_slots(
    allocation_engine, make_zone, make_container, fetch_zone,
):
    zone = await make_zone(capacity=10)
    containers = [await make_container(number=f"N-{i}") for i in range(50)]

    outcomes = await asyncio.gather(*(
        _outcome(allocation_engine.assign, c.id, zone.id) for c in containers
    ))

    assert outcomes.count("ok") == 10
    assert outcomes.count("overloaded") == 40
    assert (await fetch_zone(zone.id)).current_load == 10
    audit = await allocation_engine.audit()
    assert audit.consistent, audit.violations


async def test_ships_racing_assigns_keep_invariants(
    allocation_engine, make_zone, make_container, fetch_zone,
):
    zone = await make_zone(capacity=5, current_load=5)
    occupants = [
        await make_container(status="assigned", zone_id=zone.id, number=f"O-{i}")
        for i in range(5)
    ]
    newcomers = [await make_container(number=f"W-{i}") for i in range(8)]

    ship_tasks = [_with_retry(allocation_engine.ship, c.id) for c in occupants]
    assign_tasks = [
        _outcome(allocation_engine.assign, c.id, zone.id) for c in newcomers
    ]
    results = await asyncio.gather(*ship_tasks, *assign_tasks)
    assign_outcomes = results[len(ship_tasks):]

    load = (await fetch_zone(zone.id)).current_load
    assert 0 <= load <= 5
    assert assign_outcomes.count("ok") == load
    audit = await allocation_engine.audit()
    assert audit.consistent, audit.violations


async def test_opposite_reassignments_do_not_deadlock(
    allocation_engine, make_zone, make_container, fetch_zone,
):
    zone_a = await make_zone(capacity=10, name="A", current_load=5)
    zone_b = await make_zone(capacity=10, name="B", current_load=5)
    in_a = [
        await make_container(status="assigned", zone_id=zone_a.id, number=f"A-{i}")
        for i in range(5)
    ]
    in_b = [
        await make_container(status="assigned", zone_id=zone_b.id, number=f"B-{i}")
        for i in range(5)
    ]

    await asyncio.gather(
        *(_with_retry(allocation_engine.assign, c.id, zone_b.id) for c in in_a),
        *(_with_retry(allocation_engine.assign, c.id, zone_a.id) for c in in_b),
    )

    assert (await fetch_zone(zone_a.id)).current_load == 5
    assert (await fetch_zone(zone_b.id)).current_load == 5
    audit = await allocation_engine.audit()
    assert audit.consistent, audit.violations
