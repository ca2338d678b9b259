# src/daily_code/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .daily_code import router as daily_code_router

__all__ = ["daily_code_router"]
