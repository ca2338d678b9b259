# src/daily_code/schemas/daily_code.py
"""Daily code Pydantic schemas."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, model_validator

from daily_code.services.clock import ResetPolicy


class DailyCodeResponse(BaseModel):
    """Code of the day plus the data the widget shows around it."""

    code: str | None = Field(None, description="Today's code, or null when none exists yet")
    civil_date: dt.date
    reset_time: str = Field(..., description="Configured reset time, HH:MM")
    seconds_until_reset: int
    countdown: str = Field(..., description="Time until the next reset, HH:MM:SS")
    codes_used: int
    code_space_size: int

    model_config = ConfigDict(from_attributes=True)


class CountdownResponse(BaseModel):
    reset_time: str
    seconds_until_reset: int
    countdown: str


class ResetPolicyUpdate(BaseModel):
    """New reset time, either as ``reset_time="HH:MM"`` or as hour/minute."""

    reset_time: str | None = Field(None, pattern=r"^\d{1,2}:\d{2}(:\d{2})?$")
    hour: int | None = Field(None, ge=0, le=23)
    minute: int | None = Field(None, ge=0, le=59)

    @model_validator(mode="after")
    def _require_time(self) -> ResetPolicyUpdate:
        if self.reset_time is None and (self.hour is None or self.minute is None):
            raise ValueError("provide reset_time or both hour and minute")
        self.to_policy()
        return self

    def to_policy(self) -> ResetPolicy:
        if self.reset_time is not None:
            return ResetPolicy.parse(self.reset_time)
        return ResetPolicy(hour=int(self.hour or 0), minute=int(self.minute or 0))


class ResetPolicyResponse(BaseModel):
    reset_time: str
    hour: int
    minute: int
    timezone: str
    code_space_size: int


class DecodedCodeResponse(BaseModel):
    code: str
    sequence_index: int = Field(..., description="Index within one cycle of the code space")
