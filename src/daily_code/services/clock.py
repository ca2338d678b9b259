"""Civil time helpers for the daily reset schedule.

All wall-clock reasoning happens in one fixed civil timezone. Durations are
measured between UTC instants so that daylight-saving shifts are handled by
``zoneinfo`` rather than by hand.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from daily_code.core.settings import settings

SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


@dataclass(frozen=True)
class ResetPolicy:
    """Local time of day at which a new code becomes due."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"reset hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"reset minute out of range: {self.minute}")

    @classmethod
    def parse(cls, value: str) -> ResetPolicy:
        """Build a policy from an ``HH:MM`` (or ``HH:MM:SS``) string."""
        parts = value.strip().split(":")
        if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
            raise ValueError(f"reset time must look like HH:MM, got {value!r}")
        return cls(hour=int(parts[0]), minute=int(parts[1]))

    @classmethod
    def default(cls) -> ResetPolicy:
        hour, minute = settings.default_reset_hour_minute
        return cls(hour=hour, minute=minute)

    @property
    def label(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"

    def as_time(self) -> dt.time:
        return dt.time(self.hour, self.minute)


def _to_utc(moment: dt.datetime) -> dt.datetime:
    if moment.tzinfo is None:
        raise ValueError("civil time computations require timezone-aware datetimes")
    return moment.astimezone(dt.UTC)


def reset_instant(day: dt.date, policy: ResetPolicy, tz: dt.tzinfo) -> dt.datetime:
    """Return the reset moment on ``day`` in ``tz``."""
    return dt.datetime.combine(day, policy.as_time(), tzinfo=tz)


def next_reset(now: dt.datetime, policy: ResetPolicy, tz: dt.tzinfo) -> dt.datetime:
    """Return the next reset strictly after ``now``.

    When ``now`` is exactly at today's reset the result is tomorrow's.
    """
    local = now.astimezone(tz)
    target = reset_instant(local.date(), policy, tz)
    if _to_utc(local) >= _to_utc(target):
        target = reset_instant(local.date() + dt.timedelta(days=1), policy, tz)
    return target


def time_until_next_reset(
    now: dt.datetime,
    policy: ResetPolicy,
    tz: dt.tzinfo | None = None,
) -> dt.timedelta:
    """Return how long until the next occurrence of the reset time."""
    zone = tz or now.tzinfo
    if zone is None:
        raise ValueError("civil time computations require timezone-aware datetimes")
    return _to_utc(next_reset(now, policy, zone)) - _to_utc(now)


def reset_crossed(
    previous: dt.datetime,
    now: dt.datetime,
    policy: ResetPolicy,
    tz: dt.tzinfo,
) -> bool:
    """Return True if a reset instant falls in ``(previous, now]``."""
    local = now.astimezone(tz)
    latest = reset_instant(local.date(), policy, tz)
    if _to_utc(latest) > _to_utc(local):
        latest = reset_instant(local.date() - dt.timedelta(days=1), policy, tz)
    return _to_utc(previous) < _to_utc(latest) <= _to_utc(local)


def format_countdown(delta: dt.timedelta) -> str:
    """Render a duration as ``HH:MM:SS``, truncating fractional seconds."""
    total = max(0, int(delta.total_seconds()))
    hours, rem = divmod(total, SECONDS_PER_HOUR)
    minutes, seconds = divmod(rem, SECONDS_PER_MINUTE)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class CivilClock:
    """Wall clock pinned to a named civil timezone.

    Args:
        timezone: IANA zone name; defaults to the configured one.
        now_fn: Optional source of "now" used by tests to freeze time. It
            must return a timezone-aware datetime.
    """

    def __init__(
        self,
        timezone: str | None = None,
        now_fn: Callable[[], dt.datetime] | None = None,
    ) -> None:
        self.tz = ZoneInfo(timezone or settings.timezone)
        self._now_fn = now_fn

    def now(self) -> dt.datetime:
        if self._now_fn is not None:
            return _to_utc(self._now_fn()).astimezone(self.tz)
        return dt.datetime.now(self.tz)

    def today(self) -> dt.date:
        """Return the current civil date."""
        return self.now().date()

    def civil_date(self, moment: dt.datetime) -> dt.date:
        return moment.astimezone(self.tz).date()
