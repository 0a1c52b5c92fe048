"""
Configuration Management for InvoiceCraft

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable of the ledger engine (autosave cadence, history size,
key-derivation strength, where the ledger blob lives) is declared once
and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Durable snapshot storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="INVOICECRAFT_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".invoicecraft",
        description="Directory holding the persisted ledger blobs"
    )
    ledger_key: str = Field(
        default="invoiceCraftData",
        min_length=1,
        description="Fixed key the ledger snapshot is stored under"
    )

    @field_validator('ledger_key')
    @classmethod
    def validate_ledger_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Ledger key must not contain path separators: {v}")
        return v


class LedgerEngineSettings(BaseSettings):
    """Behavioural knobs of the ledger engine."""

    model_config = SettingsConfigDict(
        env_prefix="INVOICECRAFT_LEDGER_",
        extra="ignore"
    )

    autosave_interval_seconds: float = Field(
        default=6.0,
        gt=0,
        description="Seconds between draft autosave ticks"
    )
    history_limit: int = Field(
        default=10,
        ge=1,
        description="Number of entries kept in the recent-activity cache"
    )
    default_due_days: int = Field(
        default=14,
        ge=0,
        description="Days between issue date and due date on a new invoice"
    )
    invoice_number_prefix: str = Field(
        default="INV-",
        description="Prefix of generated invoice numbers"
    )
    report_months: int = Field(
        default=6,
        ge=1,
        le=24,
        description="Trailing months covered by the monthly rollup"
    )
    recent_limit: int = Field(
        default=5,
        ge=1,
        description="Invoices shown in the recent-invoices list"
    )


class CryptoSettings(BaseSettings):
    """Encrypted export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="INVOICECRAFT_CRYPTO_",
        extra="ignore"
    )

    pbkdf2_iterations: int = Field(
        default=100_000,
        ge=1,
        description="PBKDF2-HMAC-SHA256 iteration count"
    )
    salt_bytes: int = Field(
        default=16,
        ge=8,
        description="Random salt length in bytes"
    )
    iv_bytes: int = Field(
        default=12,
        ge=12,
        le=16,
        description="AES-GCM nonce length in bytes"
    )


class ShareSettings(BaseSettings):
    """Shareable link configuration."""

    model_config = SettingsConfigDict(
        env_prefix="INVOICECRAFT_SHARE_",
        extra="ignore"
    )

    query_param: str = Field(
        default="state",
        min_length=1,
        description="Query parameter carrying the encoded ledger"
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
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level written by the activity logger"
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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerEngineSettings:
        return LedgerEngineSettings()

    @property
    def crypto(self) -> CryptoSettings:
        return CryptoSettings()

    @property
    def share(self) -> ShareSettings:
        return ShareSettings()

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
