"""Application settings and configuration.

This module defines all configuration options for the daily code service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Daily Code Service", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./daily_code.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Daily code policy
    timezone: str = Field(default="America/Santiago", alias="DAILY_CODE_TIMEZONE")
    default_reset_time: str = Field(default="07:00", alias="DAILY_CODE_DEFAULT_RESET_TIME")
    max_mint_retries: int = Field(default=5, alias="DAILY_CODE_MAX_MINT_RETRIES")

    # Background ticker
    ticker_enabled: bool = Field(default=True, alias="DAILY_CODE_TICKER_ENABLED")
    countdown_interval_seconds: float = Field(
        default=1.0,
        alias="DAILY_CODE_COUNTDOWN_INTERVAL_SECONDS",
    )
    reset_check_interval_seconds: float = Field(
        default=60.0,
        alias="DAILY_CODE_RESET_CHECK_INTERVAL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("default_reset_time")
    @classmethod
    def _check_reset_time(cls, value: str) -> str:
        hour, sep, minute = value.strip().partition(":")
        if not sep or not hour.isdigit() or not minute.isdigit():
            raise ValueError("reset time must look like HH:MM")
        if not (0 <= int(hour) <= 23 and 0 <= int(minute) <= 59):
            raise ValueError("reset time out of range")
        return f"{int(hour):02d}:{int(minute):02d}"

    @field_validator("max_mint_retries")
    @classmethod
    def _check_retries(cls, value: int) -> int:
        if value < 1:
            raise ValueError("at least one mint attempt is required")
        return value

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def default_reset_hour_minute(self) -> tuple[int, int]:
        """Return the default reset time as an ``(hour, minute)`` pair."""
        hour, _, minute = self.default_reset_time.partition(":")
        return int(hour), int(minute)


settings = Settings()
