# src/daily_code/main.py
"""Main entry point for the daily code service."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from daily_code.api.v1 import daily_code_router
from daily_code.core.settings import settings
from daily_code.services.ticker import DailyCodeTicker

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Daily Code API",
    description="Code-of-the-day issuing for clinic front desks",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(daily_code_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    if settings.ticker_enabled:
        ticker = DailyCodeTicker()
        await ticker.start()
        app.state.ticker = ticker
        logger.info("Daily code ticker started (timezone %s)", settings.timezone)
    else:
        app.state.ticker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    ticker: DailyCodeTicker | None = getattr(app.state, "ticker", None)
    if ticker:
        await ticker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("daily_code.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
