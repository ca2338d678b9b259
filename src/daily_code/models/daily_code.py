# src/daily_code/models/daily_code.py
"""Per-day code assignments."""

from __future__ import annotations

import datetime

from sqlalchemy import BigInteger, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from daily_code.db.session import Base
from daily_code.db.time import utcnow


class DailyAssignment(Base):
    """Code issued for one civil date.

    ``civil_date`` is unique, so there is at most one live code per day.
    ``sequence_index`` is unique as well; it is the value the code was
    rendered from and is never reused. Codes themselves may repeat once the
    index wraps the code space.
    """

    __tablename__ = "daily_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    civil_date: Mapped[datetime.date] = mapped_column(Date, unique=True, nullable=False)
    code: Mapped[str] = mapped_column(String(5), nullable=False, index=True)
    sequence_index: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    created_by: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<DailyAssignment(date={self.civil_date}, code={self.code}, "
            f"index={self.sequence_index})>"
        )
