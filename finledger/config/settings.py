"""
Configuration Management for finledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable (login latency, storage location, aggregation windows)
is validated at startup instead of being scattered as literals.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Session manager configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_AUTH_",
        extra="ignore"
    )

    latency_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Simulated delay applied to login and registration"
    )
    min_secret_length: int = Field(
        default=1,
        ge=1,
        description="Minimum length of a secret accepted at registration"
    )


class StorageSettings(BaseSettings):
    """Key-value persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Which key-value backend to use"
    )
    directory: Path = Field(
        default=Path(".finledger"),
        description="Directory holding one JSON document per key (file backend)"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed write is attempted"
    )


class AnalyticsSettings(BaseSettings):
    """Dashboard aggregation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINLEDGER_ANALYTICS_",
        extra="ignore"
    )

    recent_limit: int = Field(
        default=5,
        ge=1,
        description="Default number of rows returned by recent()"
    )
    monthly_window: int = Field(
        default=6,
        ge=1,
        description="Number of month buckets kept by monthly()"
    )
    daily_window_days: int = Field(
        default=7,
        ge=1,
        le=7,
        description="Number of calendar days covered by daily()"
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to render month and weekday labels"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the interpreter cannot resolve."""
        if v.upper() == "UTC":
            return "UTC"
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v


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

    # Environment
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
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Level for the finledger loggers"
    )
    audit_history_size: int = Field(
        default=500,
        ge=0,
        description="How many audit events are kept in memory"
    )

    # Validation thresholds
    max_transaction_amount: float = Field(
        default=10_000_000.0,
        gt=0,
        description="Amounts above this are flagged for review (not rejected)"
    )


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
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def analytics(self) -> AnalyticsSettings:
        return AnalyticsSettings()

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


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {section_name: is_valid}, with a
    "<section>_error" entry describing each failure.
    """
    results = {}
    settings = get_settings()

    for section in ("auth", "storage", "analytics", "app"):
        try:
            getattr(settings, section)
            results[section] = True
        except ValueError as e:
            results[section] = False
            results[f"{section}_error"] = str(e)

    return results
