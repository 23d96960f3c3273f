"""Configuration module for ImageVault."""

from .settings import (
    DatabaseSettings,
    HttpSettings,
    KrakenSettings,
    ObservabilitySettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "HttpSettings",
    "KrakenSettings",
    "ObservabilitySettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
