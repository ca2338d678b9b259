# tests/conftest.py
from __future__ import annotations

import datetime as dt
import os
from collections.abc import Callable, Generator, Iterator
from zoneinfo import ZoneInfo

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["DAILY_CODE_TICKER_ENABLED"] = "false"

from daily_code.api.v1.endpoints.daily_code import get_clock  # noqa: E402
from daily_code.db.session import Base  # noqa: E402
from daily_code.db.session import get_db as app_get_session  # noqa: E402
from daily_code.main import app as fastapi_app  # noqa: E402
from daily_code.services.clock import CivilClock  # noqa: E402
from daily_code.services.daily_code import DailyCodeService  # noqa: E402
from daily_code.services.store import DailyCodeStore  # noqa: E402

TEST_DB_URL = "sqlite://"
SANTIAGO = ZoneInfo("America/Santiago")
# Mid-morning on an ordinary weekday, well after the default 07:00 reset.
FROZEN_NOW = dt.datetime(2026, 3, 10, 10, 15, 0, tzinfo=SANTIAGO)


def santiago(*args: int) -> dt.datetime:
    """Build an aware datetime in the clinic's civil timezone."""
    return dt.datetime(*args, tzinfo=SANTIAGO)


class FrozenClock(CivilClock):
    """Civil clock whose time only moves when a test says so."""

    def __init__(self, moment: dt.datetime) -> None:
        self.moment = moment
        super().__init__("America/Santiago", now_fn=lambda: self.moment)

    def set(self, moment: dt.datetime) -> None:
        self.moment = moment


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Callable[[], Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: Callable[[], Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(FROZEN_NOW)


@pytest.fixture()
def store(db_session: Session) -> DailyCodeStore:
    return DailyCodeStore(db_session)


@pytest.fixture()
def service(store: DailyCodeStore, clock: FrozenClock) -> DailyCodeService:
    return DailyCodeService(store, clock=clock, max_retries=3)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, db_session: Session, clock: FrozenClock) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_clock, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
