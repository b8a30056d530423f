#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FocusFlow - Configuration
Centralized settings with validation, loaded from the environment

Environment variables use the ``FOCUSFLOW_`` prefix, e.g.
``FOCUSFLOW_DATABASE_URL`` or ``FOCUSFLOW_LOG_LEVEL``. A ``.env`` file in the
working directory is read as well.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """FocusFlow settings"""

    model_config = SettingsConfigDict(
        env_prefix="FOCUSFLOW_",
        env_file=".env",
        extra="ignore",
    )

    # ===== BASIC SETTINGS =====

    APP_NAME: str = Field(default="FocusFlow", description="Application name")
    VERSION: str = Field(default="1.0.0", description="Application version")
    ENVIRONMENT: str = Field(
        default="development",
        description="Runtime environment (development/production/testing)"
    )
    DEBUG: bool = Field(default=False, description="Debug mode")

    # ===== DATABASE =====

    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///data/focusflow.db",
        description="SQLAlchemy async database URL"
    )
    DB_POOL_SIZE: int = Field(default=5, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=10, description="Extra connections above the pool size")
    DB_ECHO: bool = Field(default=False, description="Echo SQL statements")

    # ===== AUTHENTICATION =====

    SESSION_TIMEOUT: int = Field(
        default=7 * 24 * 3600,
        description="Session lifetime in seconds"
    )

    # ===== TIME =====

    TIMEZONE: str = Field(
        default="UTC",
        description="Timezone used to decide what 'today' is"
    )

    # ===== RETRIES =====

    RETRY_MAX_ATTEMPTS: int = Field(default=3, ge=0, description="Retries after the first attempt")
    RETRY_INITIAL_DELAY: float = Field(default=1.0, ge=0, description="First backoff delay in seconds")

    # ===== CONNECTION HEALTH =====

    HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Seconds between health probes")
    HEALTH_MAX_RETRIES: int = Field(default=3, description="Probe retries before giving up")
    HEALTH_RETRY_DELAY: float = Field(default=1.0, description="Base probe retry delay in seconds")
    HEALTH_MAX_DELAY: float = Field(default=10.0, description="Probe retry delay ceiling in seconds")

    # ===== CALENDAR =====

    CACHE_TTL: int = Field(default=300, description="Calendar cache TTL in seconds (5 minutes)")
    CALENDAR_FETCH_TIMEOUT: float = Field(
        default=0.1,
        description="How long the calendar waits for data before hiding the loading indicator"
    )
    CALENDAR_PRELOAD_DELAY: float = Field(
        default=0.5,
        description="Delay before adjacent ranges are preloaded"
    )

    # ===== CALENDAR EXPORT =====

    EXPORT_URL: str = Field(
        default="http://localhost:8000/functions/v1/google-calendar/download",
        description="Calendar export endpoint"
    )
    EXPORT_API_KEY: Optional[str] = Field(default=None, description="Bearer key for the export endpoint")
    DOWNLOAD_DIR: Path = Field(default=Path("downloads"), description="Where exported calendars are saved")

    # ===== LOCAL STATE / CHAT =====

    LOCAL_STORAGE_PATH: Path = Field(
        default=Path("data/local_storage.json"),
        description="Key-value file for chat transcript and flags"
    )
    CHAT_RESPONSE_DELAY_MIN: float = Field(default=1.0, description="Minimum assistant 'typing' delay")
    CHAT_RESPONSE_DELAY_MAX: float = Field(default=2.0, description="Maximum assistant 'typing' delay")

    # ===== SERVER =====

    DASHBOARD_HOST: str = Field(default="0.0.0.0", description="HTTP service host")
    DASHBOARD_PORT: int = Field(default=8000, description="HTTP service port")
    ALLOWED_ORIGINS: List[str] = Field(default=["*"], description="CORS origins")

    # ===== LOGGING =====

    LOG_LEVEL: str = Field(default="INFO", description="DEBUG/INFO/WARNING/ERROR/CRITICAL")
    LOG_FORMAT: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        description="Log record format"
    )
    LOG_FILE: Optional[Path] = Field(default=None, description="Rotating log file, stream only when unset")

    # ===== VALIDATORS =====

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid_envs = ["development", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of: {valid_envs}")
        return v.lower()

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    # ===== HELPERS =====

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_testing(self) -> bool:
        return self.ENVIRONMENT == "testing"

    @property
    def tz(self):
        return pytz.timezone(self.TIMEZONE)


@lru_cache()
def get_settings() -> Settings:
    """Return the process settings (cached)"""
    return Settings()
