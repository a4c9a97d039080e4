"""
Configuration Management for Fintrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunable thresholds live here.
The engine functions stay pure and take these values as arguments,
so the orchestrator is the only place that reads settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Aggregation and budget pacing configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_ENGINE_",
        extra="ignore"
    )

    default_home_currency: str = Field(
        default="USD",
        description="Home currency used when the user has not chosen one"
    )
    on_track_tolerance_points: float = Field(
        default=5.0,
        ge=0.0,
        le=100.0,
        description="Percentage points under pace that still count as on track"
    )
    severe_pace_points: float = Field(
        default=20.0,
        ge=0.0,
        le=100.0,
        description="Percentage points over pace above which severity is severe"
    )
    budget_warning_percentage: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Budget usage at which the progress level becomes a warning"
    )
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Number of recent transactions shown on the dashboard"
    )
    trend_months: int = Field(
        default=6,
        ge=1,
        le=24,
        description="Number of months in the project income trend"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a transaction date can be"
    )
    max_transaction_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Amount above which a transaction is flagged as suspicious"
    )

    @field_validator('default_home_currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.strip().upper()


class StorageSettings(BaseSettings):
    """Local JSON file storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_STORAGE_",
        extra="ignore"
    )

    data_file: str = Field(
        default="fintrack_data.json",
        description="Path of the JSON file holding the user's data"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for each file read/write before giving up"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Standard library log level name"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (console renderer otherwise)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept level names the logging module knows."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> str:
        """Debug mode forces DEBUG logging."""
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings(settings: Optional[Settings] = None) -> dict[str, bool]:
    """
    Validate all settings groups load from the current environment.

    Returns a dict of {setting_name: is_valid} plus
    {setting_name}_error entries for the groups that failed.
    """
    results = {}
    settings = settings or get_settings()

    for name in ("engine", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
