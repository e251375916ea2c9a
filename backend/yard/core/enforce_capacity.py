"""Capacity Enforcement — pure occupancy rules and the invariant audit.

Invariants:
    - 0 <= current_load <= capacity for every zone
    - current_load equals the number of assigned containers bound to the zone
    - zone_id is set if and only if status is assigned
    - find_invariant_violations is PURE: reads snapshots, never mutates

Design Decisions:
    - Audit over auto-repair: the raw status override can desynchronize counters,
      and which side is "right" needs an operator decision, so drift is reported only
"""

from collections import Counter
from typing import Iterable

from yard.core.domain_types import ContainerStatus
from yard.core.repository_protocols import ContainerLike, ZoneLike


def free_slots(current_load: int, capacity: int) -> int:
    """Remaining slots. Never negative, even for a zone that has drifted over."""
    return max(capacity - current_load, 0)


def find_invariant_violations(
    zones: Iterable[ZoneLike], containers: Iterable[ContainerLike],
) -> list[dict]:
    """Check capacity bounds, load bookkeeping and zone bindings."""
    violations: list[dict] = []
    assigned_per_zone: Counter[int] = Counter()

    for c in containers:
        bound = c.zone_id is not None
        assigned = c.status == ContainerStatus.ASSIGNED.value
        if bound != assigned:
            violations.append({
                "invariant": "binding_matches_status",
                "container_id": c.id,
                "message": (
                    f"Container {c.id} has status '{c.status}' "
                    f"but zone_id={c.zone_id}"
                ),
            })
        if bound and assigned:
            assigned_per_zone[c.zone_id] += 1

    for z in zones:
        if not 0 <= z.current_load <= z.capacity:
            violations.append({
                "invariant": "capacity_bounds",
                "zone_id": z.id,
                "message": (
                    f"Zone {z.id} load {z.current_load} outside 0..{z.capacity}"
                ),
            })
        expected = assigned_per_zone.get(z.id, 0)
        if z.current_load != expected:
            violations.append({
                "invariant": "load_matches_assignments",
                "zone_id": z.id,
                "message": (
                    f"Zone {z.id} load {z.current_load} but "
                    f"{expected} assigned container(s)"
                ),
            })
    return violations
