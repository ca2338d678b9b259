"""Code-of-the-day scheduling.

Each civil day owns at most one assignment. The first caller of the day
mints it by drawing the next sequence index and rendering it; concurrent
callers race on the unique ``civil_date`` column and the loser adopts the
winner's row.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from daily_code.core.codes import CODE_SPACE_SIZE, encode
from daily_code.core.settings import settings
from daily_code.models import DailyAssignment
from daily_code.services.clock import (
    CivilClock,
    ResetPolicy,
    format_countdown,
    reset_crossed,
    time_until_next_reset,
)
from daily_code.services.errors import MintRetriesExhaustedError, TransientCollisionError
from daily_code.services.store import DailyCodeStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyCodeStatus:
    """Snapshot shown by the code-of-the-day widget."""

    code: str | None
    civil_date: dt.date
    reset_time: str
    seconds_until_reset: int
    countdown: str
    codes_used: int
    code_space_size: int = CODE_SPACE_SIZE


class DailyCodeService:
    """Mint, regenerate and inspect the code of the day."""

    def __init__(
        self,
        store: DailyCodeStore,
        clock: CivilClock | None = None,
        max_retries: int | None = None,
    ) -> None:
        self.store = store
        self.clock = clock or CivilClock()
        self.max_retries = settings.max_mint_retries if max_retries is None else max_retries
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    # --- Queries --------------------------------------------------------------------
    def peek_today(self, now: dt.datetime | None = None) -> DailyAssignment | None:
        """Return today's assignment without minting one."""
        return self.store.get_for_date(self._civil_date(now))

    def current_policy(self) -> ResetPolicy:
        config = self.store.get_policy()
        if config is None:
            return ResetPolicy.default()
        return ResetPolicy(hour=config.reset_hour, minute=config.reset_minute)

    def codes_used(self) -> int:
        """Return how many sequence indices have been consumed.

        Every mint consumes exactly one index and indices start at 1, so the
        highest issued index is the running total.
        """
        return self.store.max_sequence_index() or 0

    def days_recorded(self) -> int:
        return self.store.count()

    def time_until_next_reset(
        self,
        now: dt.datetime | None = None,
        policy: ResetPolicy | None = None,
    ) -> dt.timedelta:
        moment = now or self.clock.now()
        return time_until_next_reset(moment, policy or self.current_policy(), self.clock.tz)

    def status(
        self,
        assignment: DailyAssignment | None,
        now: dt.datetime | None = None,
    ) -> DailyCodeStatus:
        moment = now or self.clock.now()
        policy = self.current_policy()
        remaining = self.time_until_next_reset(moment, policy)
        return DailyCodeStatus(
            code=assignment.code if assignment is not None else None,
            civil_date=self.clock.civil_date(moment),
            reset_time=policy.label,
            seconds_until_reset=int(remaining.total_seconds()),
            countdown=format_countdown(remaining),
            codes_used=self.codes_used(),
        )

    # --- Commands -------------------------------------------------------------------
    def get_or_create_today(
        self,
        actor: str | None = None,
        now: dt.datetime | None = None,
    ) -> DailyAssignment:
        """Return today's assignment, minting it if the day has none yet."""
        civil_date = self._civil_date(now)
        existing = self.store.get_for_date(civil_date)
        if existing is not None:
            return existing
        return self._mint(civil_date, actor, replace=False)

    def regenerate_today(
        self,
        actor: str | None = None,
        now: dt.datetime | None = None,
    ) -> DailyAssignment:
        """Replace today's code with a freshly minted one."""
        return self._mint(self._civil_date(now), actor, replace=True)

    def save_reset_policy(self, policy: ResetPolicy) -> ResetPolicy:
        """Persist a new reset time. No code is minted as a side effect."""
        config = self.store.save_policy(policy.hour, policy.minute)
        saved = ResetPolicy(hour=config.reset_hour, minute=config.reset_minute)
        logger.info("Daily code reset time set to %s", saved.label)
        return saved

    def check_reset(
        self,
        previous: dt.datetime,
        now: dt.datetime,
        policy: ResetPolicy | None = None,
    ) -> DailyAssignment | None:
        """Ensure today's code exists if the reset time passed since ``previous``."""
        active = policy or self.current_policy()
        if not reset_crossed(previous, now, active, self.clock.tz):
            return None
        logger.info("Reset time %s reached, checking today's code", active.label)
        return self.get_or_create_today(actor="scheduler", now=now)

    # --- Internals ------------------------------------------------------------------
    def _civil_date(self, now: dt.datetime | None) -> dt.date:
        if now is None:
            return self.clock.today()
        return self.clock.civil_date(now)

    def _mint(self, civil_date: dt.date, actor: str | None, *, replace: bool) -> DailyAssignment:
        floor = 1
        for attempt in range(1, self.max_retries + 1):
            next_index = max((self.store.max_sequence_index() or 0) + 1, floor)
            code = encode(next_index)
            try:
                if replace:
                    row = self.store.upsert_for_date(civil_date, code, next_index, actor)
                else:
                    row = self.store.insert(civil_date, code, next_index, actor)
            except TransientCollisionError:
                logger.warning(
                    "Collision minting code for %s (index %d, attempt %d/%d)",
                    civil_date,
                    next_index,
                    attempt,
                    self.max_retries,
                )
                if not replace:
                    winner = self.store.get_for_date(civil_date)
                    if winner is not None:
                        return winner
                floor = next_index + 1
                continue

            logger.info("Minted code %s for %s (index %d)", row.code, civil_date, next_index)
            return row

        logger.error("Giving up minting code for %s after %d attempts", civil_date, self.max_retries)
        raise MintRetriesExhaustedError(
            f"Could not mint a code for {civil_date} after {self.max_retries} attempts"
        )


def get_daily_code_service(db: Session) -> DailyCodeService:
    """Return a daily code service bound to ``db``."""
    return DailyCodeService(DailyCodeStore(db))
