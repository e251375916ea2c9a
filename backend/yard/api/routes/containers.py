"""Container Routes — registration, listing, raw status override and shipping.

Invariants:
    - Reads use a plain session (get_db); every mutation goes through AllocationEngine
    - PATCH is the operator override: it never adjusts zone load or binding
    - Shipping an already-shipped container returns 200 with already_shipped=true

Design Decisions:
    - ?status= filter on list for operator dashboards
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from yard.api.dependencies import get_allocation_engine
from yard.core.domain_types import ContainerId, ContainerStatus
from yard.infrastructure.database import get_db
from yard.schemas.container import (
    ContainerCreate,
    ContainerResponse,
    ContainerStatusPatch,
    ShipResponse,
)
from yard.services.allocation_engine import AllocationEngine
from yard.services.container_registry import ContainerRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/containers", tags=["containers"])


@router.get("", response_model=list[ContainerResponse])
async def list_containers(
    status_filter: ContainerStatus | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """List containers ordered by id."""
    containers = await ContainerRegistry(db).list_all(status_filter)
    return [ContainerResponse.model_validate(c) for c in containers]


@router.post(
    "", response_model=ContainerResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_container(
    body: ContainerCreate,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """Register a new container (status new, no zone)."""
    container = await engine.register(body.number, body.type, body.status)
    return ContainerResponse.model_validate(container)


@router.get("/{container_id}", response_model=ContainerResponse)
async def get_container(
    container_id: int, db: AsyncSession = Depends(get_db),
):
    container = await ContainerRegistry(db).get(ContainerId(container_id))
    return ContainerResponse.model_validate(container)


@router.patch("/{container_id}", response_model=ContainerResponse)
async def patch_container_status(
    container_id: int,
    body: ContainerStatusPatch,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """Operator override — sets status only, zone load is NOT adjusted."""
    container = await engine.update_status_raw(ContainerId(container_id), body.status)
    return ContainerResponse.model_validate(container)


@router.post("/{container_id}/ship", response_model=ShipResponse)
async def ship_container(
    container_id: int,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """Ship a container and release its zone slot."""
    result = await engine.ship(ContainerId(container_id))
    return ShipResponse(
        message=(
            "Container already shipped" if result.already_shipped
            else "Container shipped"
        ),
        container_id=container_id,
        already_shipped=result.already_shipped,
        released_zone_id=result.released_zone_id,
        container=ContainerResponse.model_validate(result.container),
    )
