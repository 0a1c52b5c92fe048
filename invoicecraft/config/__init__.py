"""Configuration package."""

from invoicecraft.config.settings import (
    AppSettings,
    CryptoSettings,
    LedgerEngineSettings,
    Settings,
    ShareSettings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "CryptoSettings",
    "LedgerEngineSettings",
    "Settings",
    "ShareSettings",
    "StorageSettings",
    "get_settings",
]
