"""Exceptions raised by the daily code services."""

from __future__ import annotations

from daily_code.core.codes import InvalidCodeError


class DailyCodeError(RuntimeError):
    """Base exception for daily code failures."""


class TransientCollisionError(DailyCodeError):
    """Raised when a write hits a uniqueness constraint.

    Another writer already stored a row for the same civil date or consumed
    the same sequence index. Callers recover by re-reading and retrying.
    """


class MintRetriesExhaustedError(DailyCodeError):
    """Raised when a mint kept colliding past the configured retry budget."""


class StorageUnavailableError(DailyCodeError):
    """Raised for store failures other than uniqueness violations."""


class ConfigurationSaveError(StorageUnavailableError):
    """Raised when the reset policy could not be persisted."""


__all__ = [
    "ConfigurationSaveError",
    "DailyCodeError",
    "InvalidCodeError",
    "MintRetriesExhaustedError",
    "StorageUnavailableError",
    "TransientCollisionError",
]
