"""Zone ORM — persists a bounded-capacity storage location.

Invariants:
    - capacity > 0, fixed after creation (the core never mutates it)
    - 0 <= current_load <= capacity, enforced by CHECK constraints as a storage backstop
    - current_load changes only through conditional UPDATEs in ZoneLedger

Design Decisions:
    - Integer serial id: zones are referenced by small numeric ids in every request
    - Zones are created by an administrative path with current_load = 0
"""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from yard.db.base import Base


class Zone(Base):
    """Zone entity — holds up to `capacity` assigned containers."""
    __tablename__ = "zones"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_zones_capacity_positive"),
        CheckConstraint("current_load >= 0", name="ck_zones_load_non_negative"),
        CheckConstraint(
            "current_load <= capacity", name="ck_zones_load_within_capacity",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="general")
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    current_load: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
