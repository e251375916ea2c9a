"""Container Schemas — create/patch payloads and the public container record.

Invariants:
    - ContainerCreate.number/type: optional, stripped, blank treated as omitted
    - ContainerStatusPatch.status must be a known ContainerStatus
    - ContainerResponse mirrors the persisted row (snake_case field names)

Design Decisions:
    - from_attributes=True: ORM rows validate directly into responses
    - to_event_payload() is the single place that shapes live-update payloads
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from yard.core.domain_types import ContainerStatus


class ContainerCreate(BaseModel):
    """Container registration — every field optional."""
    number: str | None = Field(None, max_length=50)
    type: str | None = Field(None, max_length=50)
    status: ContainerStatus | None = None

    @field_validator("number", "type")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class ContainerStatusPatch(BaseModel):
    """Administrative raw status override."""
    status: ContainerStatus


class ContainerResponse(BaseModel):
    """Container record as returned by the API and the live-update stream."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    number: str
    type: str
    status: ContainerStatus
    zone_id: int | None = None
    arrival_time: datetime

    def to_event_payload(self) -> dict:
        return self.model_dump(mode="json")


class ShipResponse(BaseModel):
    """Result of shipping a container."""
    message: str
    container_id: int
    already_shipped: bool
    released_zone_id: int | None = None
    container: ContainerResponse
