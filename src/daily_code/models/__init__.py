# src/daily_code/models/__init__.py
"""SQLAlchemy models for the daily code service."""

from .daily_code import DailyAssignment
from .reset_policy import CONFIG_ROW_ID, DailyCodeConfig

__all__ = [
    "DailyAssignment",
    "DailyCodeConfig", "CONFIG_ROW_ID",
]
