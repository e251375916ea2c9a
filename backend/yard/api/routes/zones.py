"""Zone Routes — zone listing, invariant audit and container assignment.

Invariants:
    - POST /{zone_id}/assign is the single assignment entry point
    - Overloaded zone → 400 ZONE_OVERLOADED; missing zone or container → 404
    - /audit is registered before /{zone_id} so it is not parsed as an id
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from yard.api.dependencies import get_allocation_engine
from yard.core.domain_types import ContainerId, ZoneId
from yard.infrastructure.database import get_db
from yard.schemas.container import ContainerResponse
from yard.schemas.zone import (
    AssignRequest,
    AssignmentResponse,
    AuditResponse,
    ZoneResponse,
)
from yard.services.allocation_engine import AllocationEngine
from yard.services.zone_ledger import ZoneLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/zones", tags=["zones"])


@router.get("", response_model=list[ZoneResponse])
async def list_zones(db: AsyncSession = Depends(get_db)):
    zones = await ZoneLedger(db).list_all()
    return [ZoneResponse.model_validate(z) for z in zones]


@router.get("/audit", response_model=AuditResponse)
async def audit_zones(
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """Report capacity and bookkeeping drift (e.g. after raw status overrides)."""
    result = await engine.audit()
    return AuditResponse(
        consistent=result.consistent,
        zones_checked=result.zones_checked,
        containers_checked=result.containers_checked,
        violations=result.violations,
    )


@router.get("/{zone_id}", response_model=ZoneResponse)
async def get_zone(zone_id: int, db: AsyncSession = Depends(get_db)):
    zone = await ZoneLedger(db).get(ZoneId(zone_id))
    return ZoneResponse.model_validate(zone)


@router.post("/{zone_id}/assign", response_model=AssignmentResponse)
async def assign_container(
    zone_id: int,
    body: AssignRequest,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """Assign (or reassign) a container to this zone."""
    result = await engine.assign(ContainerId(body.container_id), ZoneId(zone_id))
    return AssignmentResponse(
        container=ContainerResponse.model_validate(result.container),
        zone=ZoneResponse.model_validate(result.zone),
        released_zone_id=result.released_zone_id,
        already_in_zone=result.already_in_zone,
    )
