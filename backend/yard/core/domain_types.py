"""Domain Types — identifiers and enums shared by every layer.

Invariants:
    - ContainerId and ZoneId wrap the integer primary keys and are never interchangeable
    - All valid container states encoded as ContainerStatus (no raw string matching)
    - Event names are exactly the ones live-update clients subscribe to

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ContainerId = NewType("ContainerId", int)
ZoneId = NewType("ZoneId", int)


# ─── Enums ───────────────────────────────────────────────────────

class ContainerStatus(str, Enum):
    """Container lifecycle states — maps to DB `status` column.

    Transitions are monotonic: new → assigned → shipped. shipped is terminal.
    """
    NEW = "new"
    ASSIGNED = "assigned"
    SHIPPED = "shipped"


class YardEvent(str, Enum):
    """Live-update event names broadcast after a committed mutation."""
    CONTAINER_ADDED = "containerAdded"
    CONTAINER_UPDATED = "containerUpdated"
    CONTAINER_ASSIGNED = "containerAssigned"
    CONTAINER_SHIPPED = "containerShipped"
