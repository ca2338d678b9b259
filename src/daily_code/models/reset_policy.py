# src/daily_code/models/reset_policy.py
"""Process-wide reset time configuration."""

from __future__ import annotations

import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from daily_code.db.session import Base
from daily_code.db.time import utcnow

CONFIG_ROW_ID = 1


class DailyCodeConfig(Base):
    """Single-row table holding the local time at which a new code is due."""

    __tablename__ = "daily_code_config"
    __table_args__ = (
        CheckConstraint("reset_hour >= 0 AND reset_hour <= 23", name="ck_reset_hour_range"),
        CheckConstraint("reset_minute >= 0 AND reset_minute <= 59", name="ck_reset_minute_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=CONFIG_ROW_ID)
    reset_hour: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    reset_minute: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )
