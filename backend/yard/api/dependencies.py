"""Route Dependencies — wires the allocation engine to the process singletons.

Invariants:
    - Singletons are resolved at request time, never bound at import time
      (tests replace db_manager after the app is imported)
"""

from fastapi import Depends

from yard.config import Settings, get_settings
from yard.infrastructure.database import get_db_manager
from yard.infrastructure.event_broadcaster import get_broadcaster
from yard.services.allocation_engine import AllocationEngine


def get_allocation_engine(
    settings: Settings = Depends(get_settings),
) -> AllocationEngine:
    return AllocationEngine(get_db_manager(), get_broadcaster(), settings)
