"""ORM Models — SQLAlchemy declarative models for containers and zones.

Invariants:
    - All models inherit from Base (db/base.py)
    - Zone.current_load is mutated only by the allocation engine

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from yard.models.zone import Zone  # noqa: F401
from yard.models.container import Container  # noqa: F401
