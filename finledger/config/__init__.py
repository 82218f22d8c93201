"""Configuration package."""

from finledger.config.settings import (
    AnalyticsSettings,
    AppSettings,
    AuthSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AnalyticsSettings",
    "AppSettings",
    "AuthSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
