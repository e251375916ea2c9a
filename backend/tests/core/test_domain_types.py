"""Domain Types — enum values are part of the wire contract; ids are typed at the seams."""

from typing import get_type_hints

from yard.core.domain_types import ContainerId, ContainerStatus, YardEvent, ZoneId
from yard.core.enforce_lifecycle import plan_assignment
from yard.services.allocation_engine import AllocationEngine
from yard.services.container_registry import ContainerRegistry
from yard.services.zone_ledger import ZoneLedger


def test_container_status_values():
    assert [s.value for s in ContainerStatus] == ["new", "assigned", "shipped"]


def test_event_names():
    assert {e.value for e in YardEvent} == {
        "containerAdded", "containerUpdated",
        "containerAssigned", "containerShipped",
    }


def test_status_parses_from_db_string():
    assert ContainerStatus("assigned") is ContainerStatus.ASSIGNED


def test_engine_operations_take_typed_ids():
    assign = get_type_hints(AllocationEngine.assign)
    assert assign["container_id"] is ContainerId
    assert assign["zone_id"] is ZoneId
    assert get_type_hints(AllocationEngine.ship)["container_id"] is ContainerId


def test_registry_and_ledger_take_typed_ids():
    assert get_type_hints(ContainerRegistry.get_for_update)["container_id"] is ContainerId
    assert get_type_hints(ZoneLedger.increment_load)["zone_id"] is ZoneId
    assert get_type_hints(ZoneLedger.decrement_load)["zone_id"] is ZoneId


def test_plan_assignment_takes_typed_ids():
    hints = get_type_hints(plan_assignment)
    assert hints["container_id"] is ContainerId
    assert hints["target_zone_id"] is ZoneId
