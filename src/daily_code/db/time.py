# src/daily_code/db/time.py
"""UTC timestamps for audit columns.

Civil dates and reset instants are computed in ``services.clock``; stored
timestamps are always UTC.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current aware UTC time used for ``created_at``/``updated_at``."""
    return datetime.now(UTC)
