"""Tests for the code-of-the-day HTTP endpoints."""

from types import SimpleNamespace

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from daily_code.api.v1.endpoints.daily_code import get_ticker
from daily_code.core.codes import CODE_SPACE_SIZE
from daily_code.services.clock import ResetPolicy
from daily_code.services.daily_code import DailyCodeService
from daily_code.services.errors import MintRetriesExhaustedError, StorageUnavailableError
from daily_code.services.ticker import DailyCodeTicker
from tests.conftest import santiago

BASE = "/api/v1/daily-code"


@pytest.fixture
def ticker(app, session_factory, clock):
    """A ticker whose countdown was last computed 42 seconds before the reset."""
    ticker = DailyCodeTicker(session_factory=session_factory, clock=clock)
    ticker.tick_countdown(santiago(2026, 3, 10, 6, 59, 18))
    app.dependency_overrides[get_ticker] = lambda: ticker
    try:
        yield ticker
    finally:
        app.dependency_overrides.pop(get_ticker, None)


def test_get_mints_once_per_day(client: TestClient) -> None:
    r = client.get(f"{BASE}/")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["code"] == "AAA24"
    assert data["civil_date"] == "2026-03-10"
    assert data["reset_time"] == "07:00"
    assert data["countdown"] == "20:45:00"
    assert data["seconds_until_reset"] == 74_700
    assert data["codes_used"] == 1
    assert data["code_space_size"] == CODE_SPACE_SIZE

    again = client.get(f"{BASE}/").json()
    assert again["code"] == "AAA24"
    assert again["codes_used"] == 1


def test_display_never_mints(client: TestClient) -> None:
    r = client.get(f"{BASE}/display")
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["code"] is None
    assert r.json()["codes_used"] == 0

    client.get(f"{BASE}/")
    assert client.get(f"{BASE}/display").json()["code"] == "AAA24"


def test_regenerate(client: TestClient) -> None:
    client.get(f"{BASE}/")
    r = client.post(f"{BASE}/regenerate")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["code"] == "AAA25"
    assert data["codes_used"] == 2
    assert client.get(f"{BASE}/").json()["code"] == "AAA25"


def test_countdown(client: TestClient) -> None:
    r = client.get(f"{BASE}/countdown")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {
        "reset_time": "07:00",
        "seconds_until_reset": 74_700,
        "countdown": "20:45:00",
    }


def test_config_roundtrip(client: TestClient) -> None:
    r = client.get(f"{BASE}/config")
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["reset_time"] == "07:00"
    assert r.json()["timezone"] == "America/Santiago"

    r = client.put(f"{BASE}/config", json={"reset_time": "08:30"})
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["hour"] == 8 and r.json()["minute"] == 30

    r = client.put(f"{BASE}/config", json={"hour": 11, "minute": 5})
    assert r.json()["reset_time"] == "11:05"
    assert client.get(f"{BASE}/countdown").json()["countdown"] == "00:50:00"


def test_config_change_does_not_mint(client: TestClient) -> None:
    client.put(f"{BASE}/config", json={"reset_time": "10:00"})
    assert client.get(f"{BASE}/display").json()["code"] is None


def test_config_validation(client: TestClient) -> None:
    for payload in ({}, {"hour": 25, "minute": 0}, {"hour": 7}, {"reset_time": "7am"}, {"reset_time": "25:00"}):
        r = client.put(f"{BASE}/config", json=payload)
        assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY, payload


def test_config_save_failure(client: TestClient, db_session, mocker) -> None:
    mocker.patch.object(
        db_session, "commit", side_effect=OperationalError("COMMIT", {}, Exception("read-only"))
    )
    r = client.put(f"{BASE}/config", json={"reset_time": "09:00"})
    assert r.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "configuration" in r.json()["detail"]


def test_storage_failure_surfaces(client: TestClient, mocker) -> None:
    mocker.patch.object(
        DailyCodeService,
        "get_or_create_today",
        side_effect=StorageUnavailableError("connection refused"),
    )
    r = client.get(f"{BASE}/")
    assert r.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert "connection refused" in r.json()["detail"]


def test_exhausted_retries_surface(client: TestClient, mocker) -> None:
    mocker.patch.object(
        DailyCodeService,
        "regenerate_today",
        side_effect=MintRetriesExhaustedError("gave up"),
    )
    r = client.post(f"{BASE}/regenerate")
    assert r.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


def test_decode(client: TestClient) -> None:
    r = client.get(f"{BASE}/decode/aaa24")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"code": "AAA24", "sequence_index": 1}

    r = client.get(f"{BASE}/decode/AAA22")
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_countdown_served_from_running_ticker(client: TestClient, ticker) -> None:
    r = client.get(f"{BASE}/countdown")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {
        "reset_time": "07:00",
        "seconds_until_reset": 42,
        "countdown": "00:00:42",
    }


def test_display_uses_ticker_countdown_and_stored_code(client: TestClient, ticker) -> None:
    client.get(f"{BASE}/")
    data = client.get(f"{BASE}/display").json()
    assert data["code"] == "AAA24"
    assert data["countdown"] == "00:00:42"
    assert data["seconds_until_reset"] == 42


def test_config_update_reaches_running_ticker(client: TestClient, ticker) -> None:
    r = client.put(f"{BASE}/config", json={"reset_time": "09:00"})
    assert r.status_code == status.HTTP_200_OK
    assert ticker.state.policy == ResetPolicy(9, 0)
    # 10:15 -> 09:00 next day
    assert client.get(f"{BASE}/countdown").json()["countdown"] == "22:45:00"


def test_idle_ticker_is_not_used(session_factory, clock) -> None:
    idle = DailyCodeTicker(session_factory=session_factory, clock=clock)
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(ticker=idle)))
    assert get_ticker(request) is None
    assert get_ticker(SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))) is None
