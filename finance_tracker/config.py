"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
The storage backend is an explicit setting handed to the storage factory at startup.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


STORAGE_BACKENDS = ("memory", "sqlite")


class FinanceTrackerConfig(BaseSettings):
    """Finance tracker configuration"""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage configuration
    storage_backend: str = "memory"  # memory or sqlite
    database_path: str = "finance_tracker.db"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8095

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Business rules configuration
    default_alert_threshold: str = "0.80"
    seed_default_categories: bool = False

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in STORAGE_BACKENDS:
            raise ValueError(f"storage_backend must be one of {', '.join(STORAGE_BACKENDS)}")
        return value

    @field_validator("default_alert_threshold")
    @classmethod
    def validate_alert_threshold(cls, value: str) -> str:
        try:
            threshold = Decimal(value)
        except InvalidOperation:
            raise ValueError(f"default_alert_threshold must be a decimal, got {value!r}")
        if not threshold.is_finite() or threshold <= 0 or threshold > 1:
            raise ValueError("default_alert_threshold must be in (0, 1]")
        return value

    @property
    def alert_threshold(self) -> Decimal:
        return Decimal(self.default_alert_threshold)


_config: Optional[FinanceTrackerConfig] = None


def get_config() -> FinanceTrackerConfig:
    """Get global configuration instance"""
    global _config
    if _config is None:
        _config = FinanceTrackerConfig()
    return _config


def reload_config() -> FinanceTrackerConfig:
    """Reload configuration from environment"""
    global _config
    _config = FinanceTrackerConfig()
    return _config
