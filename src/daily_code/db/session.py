"""Engine and session factory for the daily code store.

Sessions are used from request handlers and from the ticker's worker threads.
"""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from daily_code.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Register the daily code tables on Base.metadata.
import daily_code.models  # noqa: E402,F401

_database_url = settings.effective_database_url

engine = create_engine(
    _database_url,
    # SQLite connections are handed between the event loop and worker threads.
    connect_args={"check_same_thread": False} if _database_url.startswith("sqlite") else {},
    pool_pre_ping=True,
    echo=settings.sql_debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
