"""Durable storage for daily code assignments and the reset policy."""

from __future__ import annotations

import datetime as dt
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from daily_code.db.time import utcnow
from daily_code.models import CONFIG_ROW_ID, DailyAssignment, DailyCodeConfig
from daily_code.services.errors import (
    ConfigurationSaveError,
    StorageUnavailableError,
    TransientCollisionError,
)

logger = logging.getLogger(__name__)


class DailyCodeStore:
    """Thin repository over a SQLAlchemy session.

    Uniqueness violations surface as ``TransientCollisionError``; any other
    database failure is rolled back and raised as ``StorageUnavailableError``.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # --- Assignments ----------------------------------------------------------------
    def get_for_date(self, civil_date: dt.date) -> DailyAssignment | None:
        try:
            return self.db.scalars(
                select(DailyAssignment).where(DailyAssignment.civil_date == civil_date)
            ).first()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StorageUnavailableError(f"Failed to read code for {civil_date}: {exc}") from exc

    def max_sequence_index(self) -> int | None:
        try:
            return self.db.scalars(
                select(DailyAssignment.sequence_index)
                .order_by(DailyAssignment.sequence_index.desc())
                .limit(1)
            ).first()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StorageUnavailableError(f"Failed to read sequence index: {exc}") from exc

    def count(self) -> int:
        try:
            return int(self.db.scalar(select(func.count()).select_from(DailyAssignment)) or 0)
        except SQLAlchemyError as exc:
            self._rollback()
            raise StorageUnavailableError(f"Failed to count codes: {exc}") from exc

    def insert(
        self,
        civil_date: dt.date,
        code: str,
        sequence_index: int,
        created_by: str | None = None,
    ) -> DailyAssignment:
        """Insert a new assignment; never overwrites an existing date."""
        row = DailyAssignment(
            civil_date=civil_date,
            code=code,
            sequence_index=sequence_index,
            created_by=created_by,
        )
        self.db.add(row)
        self._commit(f"insert code for {civil_date}", row)
        return row

    def upsert_for_date(
        self,
        civil_date: dt.date,
        code: str,
        sequence_index: int,
        created_by: str | None = None,
    ) -> DailyAssignment:
        """Replace the assignment for ``civil_date``, creating it if missing."""
        row = self.get_for_date(civil_date)
        if row is None:
            row = DailyAssignment(civil_date=civil_date)
            self.db.add(row)
        row.code = code
        row.sequence_index = sequence_index
        row.created_by = created_by
        row.created_at = utcnow()
        self._commit(f"upsert code for {civil_date}", row)
        return row

    # --- Reset policy ---------------------------------------------------------------
    def get_policy(self) -> DailyCodeConfig | None:
        try:
            return self.db.get(DailyCodeConfig, CONFIG_ROW_ID)
        except SQLAlchemyError as exc:
            self._rollback()
            raise StorageUnavailableError(f"Failed to read reset policy: {exc}") from exc

    def save_policy(self, hour: int, minute: int) -> DailyCodeConfig:
        try:
            config = self.db.get(DailyCodeConfig, CONFIG_ROW_ID)
            if config is None:
                config = DailyCodeConfig(id=CONFIG_ROW_ID)
                self.db.add(config)
            config.reset_hour = hour
            config.reset_minute = minute
            self.db.commit()
            self.db.refresh(config)
        except SQLAlchemyError as exc:
            self._rollback()
            raise ConfigurationSaveError(f"Failed to save reset policy: {exc}") from exc
        return config

    # --- Helpers --------------------------------------------------------------------
    def _commit(self, what: str, row: DailyAssignment) -> None:
        try:
            self.db.commit()
            self.db.refresh(row)
        except IntegrityError as exc:
            self._rollback()
            raise TransientCollisionError(f"Uniqueness violation during {what}") from exc
        except SQLAlchemyError as exc:
            self._rollback()
            raise StorageUnavailableError(f"Failed to {what}: {exc}") from exc

    def _rollback(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError:  # pragma: no cover - connection already gone
            logger.exception("Rollback failed")
