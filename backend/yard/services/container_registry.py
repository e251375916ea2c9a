"""Container Registry — container records and their raw lifecycle primitives.

Invariants:
    - Never commits: the caller's unit of work owns the transaction
    - set_status/bind_zone are raw primitives with no capacity awareness;
      keeping zone_id consistent with status is the allocation engine's job
    - Missing containers raise ContainerNotFoundError

Design Decisions:
    - get_for_update locks the container row (SELECT ... FOR UPDATE) so concurrent
      units of work touching the same container are serialized
    - Generated numbers combine a millisecond timestamp with a random suffix so two
      containers registered in the same millisecond still get distinct labels
"""

import time
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from yard.core.domain_types import ContainerId, ContainerStatus, ZoneId
from yard.core.errors import ContainerNotFoundError
from yard.models.container import Container as ContainerModel


def generate_container_number(prefix: str = "C-") -> str:
    return f"{prefix}{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


class ContainerRegistry:
    """Container persistence scoped to one AsyncSession."""

    def __init__(
        self,
        db: AsyncSession,
        default_type: str = "type 1",
        number_prefix: str = "C-",
    ):
        self._db = db
        self._default_type = default_type
        self._number_prefix = number_prefix

    async def create(
        self,
        number: str | None = None,
        type: str | None = None,
        initial_status: ContainerStatus | None = None,
    ) -> ContainerModel:
        container = ContainerModel(
            number=number or generate_container_number(self._number_prefix),
            type=type or self._default_type,
            status=(initial_status or ContainerStatus.NEW).value,
            zone_id=None,
        )
        self._db.add(container)
        await self._db.flush()
        return container

    async def get(self, container_id: ContainerId) -> ContainerModel:
        container = await self._db.get(ContainerModel, container_id)
        if container is None:
            raise ContainerNotFoundError(container_id)
        return container

    async def get_for_update(self, container_id: ContainerId) -> ContainerModel:
        result = await self._db.execute(
            select(ContainerModel)
            .where(ContainerModel.id == container_id)
            .with_for_update()
            .execution_options(populate_existing=True),
        )
        container = result.scalar_one_or_none()
        if container is None:
            raise ContainerNotFoundError(container_id)
        return container

    async def list_all(
        self, status: ContainerStatus | None = None,
    ) -> list[ContainerModel]:
        query = select(ContainerModel).order_by(ContainerModel.id)
        if status is not None:
            query = query.where(ContainerModel.status == status.value)
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def set_status(
        self, container_id: ContainerId, status: ContainerStatus,
    ) -> ContainerModel:
        container = await self.get(container_id)
        container.status = status.value
        await self._db.flush()
        return container

    async def bind_zone(
        self, container_id: ContainerId, zone_id: ZoneId | None,
    ) -> ContainerModel:
        container = await self.get(container_id)
        container.zone_id = zone_id
        await self._db.flush()
        return container
