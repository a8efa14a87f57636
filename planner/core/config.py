"""Configuration management for weekplanner."""

from datetime import date

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Store Configuration
    sqlite_db_path: str = Field(default="data/weekplanner.db", description="SQLite document store file path")
    store_timeout_seconds: float = Field(
        default=10.0, description="How long SQLite waits on a locked database before failing (in seconds)"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment name")

    # Week Reconciliation Configuration
    seed_week_date: date = Field(
        default=date(2025, 3, 24),
        description="Any date inside the week that must always exist in the store",
    )
    seed_year: int | None = Field(
        default=None, description="When set, reconciliation makes sure every week of this year exists"
    )
    reconcile_on_startup: bool = Field(default=True, description="Run week reconciliation when the app starts")
    reconcile_hour: int = Field(default=3, ge=0, le=23, description="Hour of the daily reconciliation job")


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_NOT_FOUND: int = 404
    HTTP_UNPROCESSABLE: int = 422
    HTTP_SERVICE_UNAVAILABLE: int = 503

    # Week Layout
    DAYS_PER_WEEK: int = 7
    WEEK_ID_PREFIX: str = "week-"
    SHARED_RANGE_SEPARATOR: str = "--to--"

    # Progress
    PROGRESS_MAX: int = 100

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 500  # Page size used when reading a whole collection


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
