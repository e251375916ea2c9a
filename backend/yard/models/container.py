"""Container ORM — persists a tracked physical container.

Invariants:
    - id and arrival_time are immutable after creation
    - status in {new, assigned, shipped} (CHECK constraint)
    - zone_id is non-null iff status = assigned (kept by the allocation engine,
      except after the raw status override)

Design Decisions:
    - number is not unique at the storage level: external labels may repeat
    - status stored as String, not a DB enum: migrations stay trivial
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from yard.db.base import Base


class Container(Base):
    """Container entity — lifecycle new → assigned → shipped."""
    __tablename__ = "containers"
    __table_args__ = (
        CheckConstraint(
            "status IN ('new', 'assigned', 'shipped')",
            name="ck_containers_status",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    number: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="new",
    )
    zone_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("zones.id"), nullable=True, index=True,
    )
    arrival_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
