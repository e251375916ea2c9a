"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The allocation engine depends on EventPublisher, never on a transport
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - publish() is sync and non-blocking: delivery is best-effort and must
      never hold a unit of work open
"""

from typing import Protocol

from yard.core.domain_types import YardEvent


class ContainerLike(Protocol):
    """Structural contract for container records (ORM row or test double)."""
    id: int
    status: str
    zone_id: int | None


class ZoneLike(Protocol):
    """Structural contract for zone records (ORM row or test double)."""
    id: int
    capacity: int
    current_load: int


class EventPublisher(Protocol):
    """Outbound live-update channel — implemented by infrastructure."""
    def publish(self, event: YardEvent, payload: dict) -> None: ...
