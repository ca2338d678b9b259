"""Background ticks driving the code-of-the-day display.

The ticker owns two periodic tasks:

- a countdown tick (about once per second) that only recomputes the time
  left until the next reset and never touches storage;
- a reset-check tick (about once per minute) that mints today's code once
  the configured reset time has been crossed.

Both tasks are created by ``start()`` and cancelled by ``stop()``; the
application ties them to its startup and shutdown events.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from daily_code.core.settings import settings
from daily_code.db.session import SessionLocal
from daily_code.services.clock import (
    CivilClock,
    ResetPolicy,
    format_countdown,
    time_until_next_reset,
)
from daily_code.services.daily_code import DailyCodeService
from daily_code.services.errors import DailyCodeError
from daily_code.services.store import DailyCodeStore

logger = logging.getLogger(__name__)


@dataclass
class TickerState:
    """Display state maintained between ticks."""

    policy: ResetPolicy
    code: str | None = None
    countdown: str = ""
    seconds_until_reset: int = 0
    last_check: dt.datetime | None = None
    last_error: str | None = None


class DailyCodeTicker:
    """Runs the countdown and reset-check loops for one hosting surface."""

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        clock: CivilClock | None = None,
        countdown_interval: float | None = None,
        reset_check_interval: float | None = None,
    ) -> None:
        self._session_factory = session_factory or SessionLocal
        self.clock = clock or CivilClock()
        self.countdown_interval = _interval(countdown_interval, settings.countdown_interval_seconds)
        self.reset_check_interval = _interval(
            reset_check_interval, settings.reset_check_interval_seconds
        )
        self.state = TickerState(policy=ResetPolicy.default())
        self._tasks: list[asyncio.Task[None]] = []
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        """Start both periodic tasks."""
        if self.running:
            return

        self._stopping.clear()
        self.state.last_check = self.clock.now()
        await self.refresh()
        self.tick_countdown()
        self._tasks = [
            asyncio.create_task(self._countdown_loop(), name="daily-code-countdown"),
            asyncio.create_task(self._reset_loop(), name="daily-code-reset-check"),
        ]

    async def stop(self) -> None:
        """Cancel both periodic tasks and wait for them to finish."""
        if not self._tasks:
            return

        self._stopping.set()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    def tick_countdown(self, now: dt.datetime | None = None) -> str:
        """Recompute the countdown shown next to the code."""
        moment = now or self.clock.now()
        remaining = time_until_next_reset(moment, self.state.policy, self.clock.tz)
        self.state.seconds_until_reset = int(remaining.total_seconds())
        self.state.countdown = format_countdown(remaining)
        return self.state.countdown

    async def tick_reset(self, now: dt.datetime | None = None) -> None:
        """Mint today's code if the reset time passed since the last check."""
        moment = now or self.clock.now()
        previous = self.state.last_check or moment
        try:
            policy, code = await asyncio.to_thread(self._check_reset, previous, moment)
        except DailyCodeError as exc:
            # last_check is kept so the next tick sees the same boundary again
            logger.warning("Reset check failed: %s", exc)
            self.state.last_error = str(exc)
            return
        except Exception as exc:
            logger.exception("Unexpected error during reset check")
            self.state.last_error = str(exc)
            return

        self.state.policy = policy
        self.state.code = code
        self.state.last_check = moment
        self.state.last_error = None

    def apply_policy(self, policy: ResetPolicy) -> None:
        """Switch to a freshly saved reset policy without waiting for the next check."""
        self.state.policy = policy
        self.tick_countdown()

    async def refresh(self) -> None:
        """Reload the policy and today's code without minting."""
        try:
            policy, code = await asyncio.to_thread(self._load)
        except DailyCodeError as exc:
            logger.warning("Failed to load daily code state: %s", exc)
            self.state.last_error = str(exc)
            return
        self.state.policy = policy
        self.state.code = code

    async def _countdown_loop(self) -> None:
        while not self._stopping.is_set():
            self.tick_countdown()
            await asyncio.sleep(self.countdown_interval)

    async def _reset_loop(self) -> None:
        while not self._stopping.is_set():
            await asyncio.sleep(self.reset_check_interval)
            await self.tick_reset()

    def _service(self, db: Session) -> DailyCodeService:
        return DailyCodeService(DailyCodeStore(db), clock=self.clock)

    def _check_reset(
        self, previous: dt.datetime, now: dt.datetime
    ) -> tuple[ResetPolicy, str | None]:
        with self._session_factory() as db:
            service = self._service(db)
            policy = service.current_policy()
            row = service.check_reset(previous, now, policy)
            if row is None:
                row = service.peek_today(now)
            return policy, row.code if row is not None else None

    def _load(self) -> tuple[ResetPolicy, str | None]:
        with self._session_factory() as db:
            service = self._service(db)
            row = service.peek_today()
            return service.current_policy(), row.code if row is not None else None


def _interval(value: float | None, default: float) -> float:
    seconds = float(default if value is None else value)
    if seconds <= 0:
        raise ValueError("tick intervals must be positive")
    return seconds
