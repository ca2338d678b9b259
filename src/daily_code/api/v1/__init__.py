# src/daily_code/api/v1/__init__.py
"""Version 1 of the daily code API."""

from .endpoints import daily_code_router

__all__ = ["daily_code_router"]
