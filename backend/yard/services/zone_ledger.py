"""Zone Ledger — zone capacity and occupancy counters.

Invariants:
    - increment_load is a single conditional UPDATE (current_load < capacity):
      the check and the increment cannot be separated by a concurrent writer
    - decrement_load floors at zero; decrementing an empty zone is a no-op
    - capacity is never written
    - Never commits: the caller's unit of work owns the transaction

Design Decisions:
    - Compare-and-swap in SQL over read-modify-write in Python: correctness does not
      depend on running a single process
    - lock() takes zone rows in ascending id order so two reassignments moving
      containers in opposite directions cannot deadlock
    - A full zone raises ZoneOverloadedError; inside a unit of work that rolls back
      every earlier step, including a release from the previous zone
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from yard.core.domain_types import ZoneId
from yard.core.errors import ZoneNotFoundError, ZoneOverloadedError
from yard.models.zone import Zone as ZoneModel

logger = logging.getLogger(__name__)


class ZoneLedger:
    """Zone occupancy persistence scoped to one AsyncSession."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, zone_id: ZoneId) -> ZoneModel:
        result = await self._db.execute(
            select(ZoneModel)
            .where(ZoneModel.id == zone_id)
            .execution_options(populate_existing=True),
        )
        zone = result.scalar_one_or_none()
        if zone is None:
            raise ZoneNotFoundError(zone_id)
        return zone

    async def list_all(self) -> list[ZoneModel]:
        result = await self._db.execute(select(ZoneModel).order_by(ZoneModel.id))
        return list(result.scalars().all())

    async def lock(self, zone_ids: list[ZoneId]) -> dict[ZoneId, ZoneModel]:
        """Lock existing zone rows in ascending id order. Missing ids are absent from the result."""
        result = await self._db.execute(
            select(ZoneModel)
            .where(ZoneModel.id.in_(sorted(set(zone_ids))))
            .order_by(ZoneModel.id)
            .with_for_update()
            .execution_options(populate_existing=True),
        )
        return {zone.id: zone for zone in result.scalars().all()}

    async def increment_load(self, zone_id: ZoneId) -> ZoneModel:
        """Take one slot. Raises ZoneOverloadedError when the zone is full."""
        result = await self._db.execute(
            update(ZoneModel)
            .where(
                ZoneModel.id == zone_id,
                ZoneModel.current_load < ZoneModel.capacity,
            )
            .values(current_load=ZoneModel.current_load + 1)
            .execution_options(synchronize_session=False),
        )
        zone = await self.get(zone_id)
        if result.rowcount == 0:
            logger.info(
                f"Zone {zone_id} full ({zone.current_load}/{zone.capacity})",
                extra={"zone_id": zone_id},
            )
            raise ZoneOverloadedError(zone_id, zone.capacity)
        return zone

    async def decrement_load(self, zone_id: ZoneId) -> ZoneModel:
        """Release one slot, clamped at zero."""
        result = await self._db.execute(
            update(ZoneModel)
            .where(ZoneModel.id == zone_id, ZoneModel.current_load > 0)
            .values(current_load=ZoneModel.current_load - 1)
            .execution_options(synchronize_session=False),
        )
        zone = await self.get(zone_id)
        if result.rowcount == 0:
            logger.warning(
                f"Zone {zone_id} already empty, release ignored",
                extra={"zone_id": zone_id},
            )
        return zone
