"""Lifecycle Enforcement — pure rules for container status transitions.

Invariants:
    - Transitions are monotonic along new → assigned → shipped; shipped is terminal
    - plan_* functions are PURE: they return what the engine must do, never mutate state
    - A container is bound to a zone if and only if its status is assigned

Design Decisions:
    - Plans as frozen dataclasses: the engine applies them inside one unit of work,
      so a rejected plan (raised error) never leaves a partial write behind
    - Re-assigning to the zone already held is a no-op plan, not a second increment
"""

from dataclasses import dataclass

from yard.core.domain_types import ContainerId, ContainerStatus, ZoneId
from yard.core.errors import InvalidTransitionError, ErrorContext


@dataclass(frozen=True)
class AssignmentPlan:
    """Load changes needed to bind a container to target_zone_id."""
    target_zone_id: ZoneId
    release_zone_id: ZoneId | None = None
    already_in_zone: bool = False


@dataclass(frozen=True)
class ShipmentPlan:
    """Load changes needed to ship a container."""
    already_shipped: bool
    release_zone_id: ZoneId | None = None


def zones_touched(
    current_zone_id: ZoneId | None, target_zone_id: ZoneId,
) -> list[ZoneId]:
    """Zones an assignment may write, ascending: the lock order that avoids deadlocks."""
    ids = {target_zone_id}
    if current_zone_id is not None:
        ids.add(current_zone_id)
    return sorted(ids)


def is_terminal(status: ContainerStatus) -> bool:
    return status == ContainerStatus.SHIPPED


def plan_assignment(
    container_id: ContainerId,
    status: ContainerStatus,
    current_zone_id: ZoneId | None,
    target_zone_id: ZoneId,
) -> AssignmentPlan:
    """Decide how to move a container into target_zone_id. Raises on shipped."""
    if is_terminal(status):
        raise InvalidTransitionError(
            status.value, "assign",
            ErrorContext(container_id=container_id, zone_id=target_zone_id),
        )
    if current_zone_id is None:
        return AssignmentPlan(target_zone_id=target_zone_id)
    if current_zone_id == target_zone_id and status == ContainerStatus.ASSIGNED:
        return AssignmentPlan(target_zone_id=target_zone_id, already_in_zone=True)
    return AssignmentPlan(
        target_zone_id=target_zone_id, release_zone_id=current_zone_id,
    )


def plan_shipment(
    status: ContainerStatus, current_zone_id: ZoneId | None,
) -> ShipmentPlan:
    """Decide how to ship a container. Re-shipping is an idempotent no-op."""
    if is_terminal(status):
        return ShipmentPlan(already_shipped=True)
    return ShipmentPlan(already_shipped=False, release_zone_id=current_zone_id)


def check_initial_status(status: ContainerStatus | None) -> ContainerStatus:
    """Validate the status a new container may start in.

    assigned is refused: a zone binding can only be made through assign,
    which is the only path that increments a zone's load.
    """
    if status is None:
        return ContainerStatus.NEW
    if status == ContainerStatus.ASSIGNED:
        raise InvalidTransitionError(ContainerStatus.NEW.value, "create as assigned")
    return status
