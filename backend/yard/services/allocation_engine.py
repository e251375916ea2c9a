"""Allocation Engine — assigns, reassigns and releases containers under the capacity invariant.

Invariants:
    - assign, ship, register and update_status_raw each run as ONE unit of work:
      every step commits together or none does
    - Row locks: container first, then the touched zones in ascending id order
    - A failed assign (full target zone) restores the previous zone's load
    - Events are published only AFTER commit; a publisher failure is logged and
      never rolls back or blocks the committed change
    - Every unit of work is bounded by transaction_timeout_seconds → ContentionError

Design Decisions:
    - Pure planning in core/enforce_lifecycle.py, IO here (impureim sandwich)
    - update_status_raw is an operator escape hatch: it changes status only and does
      NOT touch zone_id or current_load. Misuse (e.g. assigned → shipped) leaves the
      zone's load stale; drift is visible through audit(). It is never called by
      assign/ship
    - Results carry detached ORM rows (expire_on_commit=False); routes serialize them
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from yard.config import Settings, get_settings
from yard.core.domain_types import ContainerId, ContainerStatus, YardEvent, ZoneId
from yard.core.enforce_capacity import find_invariant_violations
from yard.core.enforce_lifecycle import (
    check_initial_status,
    plan_assignment,
    plan_shipment,
    zones_touched,
)
from yard.core.errors import ContentionError, ZoneNotFoundError
from yard.core.repository_protocols import EventPublisher
from yard.infrastructure.database import DatabaseSessionManager
from yard.models.container import Container as ContainerModel
from yard.models.zone import Zone as ZoneModel
from yard.schemas.container import ContainerResponse
from yard.services.container_registry import ContainerRegistry
from yard.services.zone_ledger import ZoneLedger

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AssignmentResult:
    container: ContainerModel
    zone: ZoneModel
    released_zone_id: ZoneId | None = None
    already_in_zone: bool = False


@dataclass
class ShipResult:
    container: ContainerModel
    already_shipped: bool
    released_zone_id: ZoneId | None = None


@dataclass
class AuditResult:
    zones_checked: int
    containers_checked: int
    violations: list[dict]

    @property
    def consistent(self) -> bool:
        return not self.violations


class AllocationEngine:
    """Coordinates ContainerRegistry and ZoneLedger inside atomic units of work."""

    def __init__(
        self,
        db_manager: DatabaseSessionManager,
        publisher: EventPublisher,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self._db = db_manager
        self._publisher = publisher
        self._timeout = settings.transaction_timeout_seconds
        self._retry_after_ms = settings.contention_retry_after_ms
        self._default_type = settings.default_container_type
        self._number_prefix = settings.container_number_prefix

    # ─── Public operations ───────────────────────────────────────

    async def register(
        self,
        number: str | None = None,
        type: str | None = None,
        initial_status: ContainerStatus | None = None,
    ) -> ContainerModel:
        """Create a container (status new unless told otherwise, never assigned)."""
        status = check_initial_status(initial_status)

        async def unit(db: AsyncSession) -> ContainerModel:
            return await self._registry(db).create(number, type, status)

        container = await self._run(unit)
        logger.info(
            f"Container {container.id} registered as {container.number}",
            extra={"container_id": container.id, "status": container.status},
        )
        self._notify(YardEvent.CONTAINER_ADDED, _payload(container))
        return container

    async def assign(
        self, container_id: ContainerId, zone_id: ZoneId,
    ) -> AssignmentResult:
        """Bind a container to a zone, releasing any other zone it occupied."""

        async def unit(db: AsyncSession) -> AssignmentResult:
            registry, ledger = self._registry(db), ZoneLedger(db)
            container = await registry.get_for_update(container_id)
            zones = await ledger.lock(zones_touched(container.zone_id, zone_id))
            if zone_id not in zones:
                raise ZoneNotFoundError(zone_id)
            plan = plan_assignment(
                container_id,
                ContainerStatus(container.status),
                container.zone_id,
                zone_id,
            )
            if plan.already_in_zone:
                return AssignmentResult(
                    container=container, zone=zones[zone_id], already_in_zone=True,
                )
            if plan.release_zone_id in zones:
                await ledger.decrement_load(plan.release_zone_id)
            zone = await ledger.increment_load(zone_id)
            await registry.set_status(container_id, ContainerStatus.ASSIGNED)
            await registry.bind_zone(container_id, zone_id)
            return AssignmentResult(
                container=container,
                zone=zone,
                released_zone_id=plan.release_zone_id,
            )

        result = await self._run(unit)
        if result.already_in_zone:
            logger.info(
                f"Container {container_id} already in zone {zone_id}",
                extra={"container_id": container_id, "zone_id": zone_id},
            )
            return result
        logger.info(
            f"Container {container_id} assigned to zone {zone_id} "
            f"({result.zone.current_load}/{result.zone.capacity})",
            extra={
                "container_id": container_id,
                "zone_id": zone_id,
                "released_zone_id": result.released_zone_id,
            },
        )
        self._notify(YardEvent.CONTAINER_ASSIGNED, _payload(result.container))
        return result

    async def ship(self, container_id: ContainerId) -> ShipResult:
        """Ship a container, releasing its zone. Re-shipping is a no-op."""

        async def unit(db: AsyncSession) -> ShipResult:
            registry, ledger = self._registry(db), ZoneLedger(db)
            container = await registry.get_for_update(container_id)
            plan = plan_shipment(
                ContainerStatus(container.status), container.zone_id,
            )
            if plan.already_shipped:
                return ShipResult(container=container, already_shipped=True)
            if plan.release_zone_id is not None:
                zones = await ledger.lock([plan.release_zone_id])
                if plan.release_zone_id in zones:
                    await ledger.decrement_load(plan.release_zone_id)
            await registry.set_status(container_id, ContainerStatus.SHIPPED)
            await registry.bind_zone(container_id, None)
            return ShipResult(
                container=container,
                already_shipped=False,
                released_zone_id=plan.release_zone_id,
            )

        result = await self._run(unit)
        if result.already_shipped:
            logger.info(
                f"Container {container_id} already shipped",
                extra={"container_id": container_id},
            )
            return result
        logger.info(
            f"Container {container_id} shipped",
            extra={
                "container_id": container_id,
                "released_zone_id": result.released_zone_id,
            },
        )
        self._notify(YardEvent.CONTAINER_SHIPPED, {"id": container_id})
        return result

    async def update_status_raw(
        self, container_id: ContainerId, status: ContainerStatus,
    ) -> ContainerModel:
        """Operator override: set status without touching zone binding or load."""

        async def unit(db: AsyncSession) -> ContainerModel:
            return await self._registry(db).set_status(container_id, status)

        container = await self._run(unit)
        logger.warning(
            f"Raw status override on container {container_id} -> {status.value}; "
            f"zone binding ({container.zone_id}) and zone load left untouched",
            extra={
                "container_id": container_id,
                "zone_id": container.zone_id,
                "status": status.value,
            },
        )
        self._notify(YardEvent.CONTAINER_UPDATED, _payload(container))
        return container

    async def audit(self) -> AuditResult:
        """Check capacity bounds, load bookkeeping and bindings over one snapshot."""

        async def unit(db: AsyncSession) -> AuditResult:
            zones = await ZoneLedger(db).list_all()
            containers = await self._registry(db).list_all()
            return AuditResult(
                zones_checked=len(zones),
                containers_checked=len(containers),
                violations=find_invariant_violations(zones, containers),
            )

        result = await self._run(unit)
        if not result.consistent:
            logger.warning(f"Invariant audit found {len(result.violations)} violation(s)")
        return result

    # ─── Unit-of-work plumbing ───────────────────────────────────

    def _registry(self, db: AsyncSession) -> ContainerRegistry:
        return ContainerRegistry(db, self._default_type, self._number_prefix)

    async def _run(self, unit: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Execute unit in one transaction, bounded by the configured timeout."""
        try:
            return await asyncio.wait_for(
                self._in_transaction(unit), timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Unit of work exceeded {self._timeout}s, rolled back")
            raise ContentionError(
                f"Operation did not complete within {self._timeout}s, retry later",
                self._retry_after_ms,
            )

    async def _in_transaction(
        self, unit: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        async with self._db.transaction() as db:
            return await unit(db)

    def _notify(self, event: YardEvent, payload: dict) -> None:
        """Best-effort publish after commit. Failures are logged, never raised."""
        try:
            self._publisher.publish(event, payload)
        except Exception as e:
            logger.warning(
                f"Failed to publish {event.value}: {e}",
                extra={"event": event.value},
            )


def _payload(container: ContainerModel) -> dict:
    return ContainerResponse.model_validate(container).to_event_payload()
