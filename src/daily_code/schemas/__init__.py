# src/daily_code/schemas/__init__.py
"""
Pydantic schemas for API request/response models.
"""

from .daily_code import (
    CountdownResponse,
    DailyCodeResponse,
    DecodedCodeResponse,
    ResetPolicyResponse,
    ResetPolicyUpdate,
)

__all__ = [
    "CountdownResponse",
    "DailyCodeResponse",
    "DecodedCodeResponse",
    "ResetPolicyResponse",
    "ResetPolicyUpdate",
]
