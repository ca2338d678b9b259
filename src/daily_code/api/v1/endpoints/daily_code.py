# src/daily_code/api/v1/endpoints/daily_code.py
"""Code-of-the-day endpoints."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Annotated, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from daily_code.core.codes import CODE_SPACE_SIZE, InvalidCodeError, decode, encode
from daily_code.db.session import get_db
from daily_code.schemas.daily_code import (
    CountdownResponse,
    DailyCodeResponse,
    DecodedCodeResponse,
    ResetPolicyResponse,
    ResetPolicyUpdate,
)
from daily_code.services.clock import CivilClock, ResetPolicy, format_countdown
from daily_code.services.daily_code import DailyCodeService, DailyCodeStatus
from daily_code.services.errors import (
    ConfigurationSaveError,
    MintRetriesExhaustedError,
    StorageUnavailableError,
)
from daily_code.services.store import DailyCodeStore
from daily_code.services.ticker import DailyCodeTicker

router = APIRouter(prefix="/daily-code", tags=["daily-code"])

T = TypeVar("T")


def get_clock() -> CivilClock:
    """Return the civil clock used by the endpoints."""
    return CivilClock()


SessionDep = Annotated[Session, Depends(get_db)]
ClockDep = Annotated[CivilClock, Depends(get_clock)]


def get_daily_code_service_dep(db: SessionDep, clock: ClockDep) -> DailyCodeService:
    """Return a daily code service bound to the request session."""
    return DailyCodeService(DailyCodeStore(db), clock=clock)


ServiceDep = Annotated[DailyCodeService, Depends(get_daily_code_service_dep)]


def get_ticker(request: Request) -> DailyCodeTicker | None:
    """Return the application's ticker while its loops are running."""
    ticker: DailyCodeTicker | None = getattr(request.app.state, "ticker", None)
    if ticker is None or not ticker.running:
        return None
    return ticker


TickerDep = Annotated[DailyCodeTicker | None, Depends(get_ticker)]


def _guard(action: Callable[[], T]) -> T:
    try:
        return action()
    except ConfigurationSaveError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not save configuration: {exc}",
        ) from exc
    except MintRetriesExhaustedError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    except StorageUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Storage unavailable: {exc}",
        ) from exc


def _to_response(snapshot: DailyCodeStatus) -> DailyCodeResponse:
    return DailyCodeResponse.model_validate(snapshot)


def _policy_response(policy: ResetPolicy, clock: CivilClock) -> ResetPolicyResponse:
    return ResetPolicyResponse(
        reset_time=policy.label,
        hour=policy.hour,
        minute=policy.minute,
        timezone=str(clock.tz),
        code_space_size=CODE_SPACE_SIZE,
    )


@router.get("/", response_model=DailyCodeResponse)
async def get_daily_code(service: ServiceDep) -> DailyCodeResponse:
    """Return today's code, minting it when the day has none yet."""

    def _load() -> DailyCodeStatus:
        now = service.clock.now()
        assignment = service.get_or_create_today(now=now)
        return service.status(assignment, now)

    return _to_response(_guard(_load))


@router.get("/display", response_model=DailyCodeResponse)
async def get_display_code(service: ServiceDep, ticker: TickerDep) -> DailyCodeResponse:
    """Read-only view for the waiting-room screen; never mints."""

    def _load() -> DailyCodeStatus:
        now = service.clock.now()
        return service.status(service.peek_today(now), now)

    snapshot = _guard(_load)
    if ticker is not None:
        # Keep the screen in step with the countdown tick.
        snapshot = replace(
            snapshot,
            reset_time=ticker.state.policy.label,
            seconds_until_reset=ticker.state.seconds_until_reset,
            countdown=ticker.state.countdown,
        )
    return _to_response(snapshot)


@router.post("/regenerate", response_model=DailyCodeResponse)
async def regenerate_daily_code(service: ServiceDep) -> DailyCodeResponse:
    """Replace today's code with the next one in the sequence."""

    def _regenerate() -> DailyCodeStatus:
        now = service.clock.now()
        assignment = service.regenerate_today(actor="manual", now=now)
        return service.status(assignment, now)

    return _to_response(_guard(_regenerate))


@router.get("/countdown", response_model=CountdownResponse)
async def get_countdown(service: ServiceDep, ticker: TickerDep) -> CountdownResponse:
    """Return the time left until the next reset."""
    if ticker is not None:
        return CountdownResponse(
            reset_time=ticker.state.policy.label,
            seconds_until_reset=ticker.state.seconds_until_reset,
            countdown=ticker.state.countdown,
        )
    policy = _guard(service.current_policy)
    remaining = service.time_until_next_reset(policy=policy)
    return CountdownResponse(
        reset_time=policy.label,
        seconds_until_reset=int(remaining.total_seconds()),
        countdown=format_countdown(remaining),
    )


@router.get("/config", response_model=ResetPolicyResponse)
async def get_config(service: ServiceDep) -> ResetPolicyResponse:
    return _policy_response(_guard(service.current_policy), service.clock)


@router.put("/config", response_model=ResetPolicyResponse)
async def update_config(
    payload: ResetPolicyUpdate, service: ServiceDep, ticker: TickerDep
) -> ResetPolicyResponse:
    """Change the daily reset time. No code is minted as a side effect."""
    saved = _guard(lambda: service.save_reset_policy(payload.to_policy()))
    if ticker is not None:
        ticker.apply_policy(saved)
    return _policy_response(saved, service.clock)


@router.get("/decode/{code}", response_model=DecodedCodeResponse)
async def decode_code(code: str) -> DecodedCodeResponse:
    """Resolve a typed code to its position in the sequence."""
    try:
        index = decode(code)
    except InvalidCodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return DecodedCodeResponse(code=encode(index), sequence_index=index)


__all__ = ["router", "get_clock", "get_daily_code_service_dep", "get_ticker"]
