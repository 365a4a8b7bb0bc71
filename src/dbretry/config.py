"""
Configuration settings for the request lifecycle layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "dbretry"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "production" switches logs to JSON

    # === Per-service timeout overrides (ms, None = built-in default) ===
    KEY_VALUE_TIMEOUT_MS: Optional[int] = None
    VIEW_TIMEOUT_MS: Optional[int] = None
    QUERY_TIMEOUT_MS: Optional[int] = None
    ANALYTICS_TIMEOUT_MS: Optional[int] = None
    SEARCH_TIMEOUT_MS: Optional[int] = None
    MANAGEMENT_TIMEOUT_MS: Optional[int] = None

    # === Retry ===
    RETRY_BACKOFF_CAP_MS: int = 50  # Cap for best-effort exponential backoff

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
