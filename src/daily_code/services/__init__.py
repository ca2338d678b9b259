# src/daily_code/services/__init__.py
"""Business logic services for the daily code service."""

from .clock import CivilClock, ResetPolicy
from .daily_code import DailyCodeService, DailyCodeStatus
from .store import DailyCodeStore
from .ticker import DailyCodeTicker

__all__ = [
    "CivilClock",
    "ResetPolicy",
    "DailyCodeService",
    "DailyCodeStatus",
    "DailyCodeStore",
    "DailyCodeTicker",
]
