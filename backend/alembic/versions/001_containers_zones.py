"""Initial schema — zones and containers with capacity CHECK constraints.

Revision ID: 001_containers_zones
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_containers_zones"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "zones",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("type", sa.String(50), nullable=False, server_default="general"),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("current_load", sa.Integer, nullable=False, server_default="0"),
        sa.CheckConstraint("capacity > 0", name="ck_zones_capacity_positive"),
        sa.CheckConstraint("current_load >= 0", name="ck_zones_load_non_negative"),
        sa.CheckConstraint(
            "current_load <= capacity", name="ck_zones_load_within_capacity",
        ),
    )

    op.create_table(
        "containers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("number", sa.String(50), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="new"),
        sa.Column("zone_id", sa.Integer, sa.ForeignKey("zones.id"), nullable=True),
        sa.Column(
            "arrival_time", sa.DateTime(timezone=True),
            nullable=False, server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "status IN ('new', 'assigned', 'shipped')",
            name="ck_containers_status",
        ),
    )
    op.create_index("ix_containers_zone_id", "containers", ["zone_id"])


def downgrade() -> None:
    op.drop_index("ix_containers_zone_id", table_name="containers")
    op.drop_table("containers")
    op.drop_table("zones")
