"""daily codes

Revision ID: 3a9c51e7d204
Revises:
Create Date: 2026-10-18 09:12:40.114502

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3a9c51e7d204"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the daily code and reset configuration tables."""
    op.create_table(
        "daily_codes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("civil_date", sa.Date(), nullable=False),
        sa.Column("code", sa.String(length=5), nullable=False),
        sa.Column("sequence_index", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("civil_date"),
        sa.UniqueConstraint("sequence_index"),
    )
    op.create_index(op.f("ix_daily_codes_code"), "daily_codes", ["code"], unique=False)

    op.create_table(
        "daily_code_config",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("reset_hour", sa.Integer(), nullable=False),
        sa.Column("reset_minute", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("reset_hour >= 0 AND reset_hour <= 23", name="ck_reset_hour_range"),
        sa.CheckConstraint(
            "reset_minute >= 0 AND reset_minute <= 59", name="ck_reset_minute_range"
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop the daily code tables."""
    op.drop_table("daily_code_config")
    op.drop_index(op.f("ix_daily_codes_code"), table_name="daily_codes")
    op.drop_table("daily_codes")
