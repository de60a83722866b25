"""
hang: Service Configuration
==============================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads HANG_* environment variables (or a .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Read by main.run() when starting a service.
When:  Loaded once at module import time.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service settings loaded from environment variables.

    All settings have defaults suitable for local development.
    """

    # ── Identity ──────────────────────────────────────────────────────────
    # What: Nice name of the service, used only in log messages
    # Empty: falls back to the executable name (sys.argv[0])
    process_name: str = Field(default="")

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = SettingsConfigDict(
        env_prefix="HANG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton instance
settings = Settings()
