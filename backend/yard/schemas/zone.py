"""Zone Schemas — zone records, assignment payloads and the invariant audit.

Invariants:
    - AssignRequest.container_id accepts `container_id` or legacy `containerId`
    - ZoneResponse.free_slots is derived, never stored

Design Decisions:
    - AliasChoices over two fields: older clients keep working without a second code path
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field

from yard.core import enforce_capacity
from yard.schemas.container import ContainerResponse


class ZoneResponse(BaseModel):
    """Zone record with occupancy."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    capacity: int
    current_load: int

    @computed_field
    @property
    def free_slots(self) -> int:
        return enforce_capacity.free_slots(self.current_load, self.capacity)


class AssignRequest(BaseModel):
    container_id: int = Field(
        validation_alias=AliasChoices("container_id", "containerId"),
    )


class AssignmentResponse(BaseModel):
    """Result of assigning a container to a zone."""
    container: ContainerResponse
    zone: ZoneResponse
    released_zone_id: int | None = None
    already_in_zone: bool = False


class InvariantViolation(BaseModel):
    invariant: str
    message: str
    zone_id: int | None = None
    container_id: int | None = None


class AuditResponse(BaseModel):
    consistent: bool
    zones_checked: int
    containers_checked: int
    violations: list[InvariantViolation]
