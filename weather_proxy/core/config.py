"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Production usually injects env vars directly, so the file is optional
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_weather_settings() -> "WeatherSettings":
    """Build upstream provider settings from environment."""

    return WeatherSettings()


def _build_app_settings() -> "AppSettings":
    return AppSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class WeatherSettings(BaseSettings):
    """Upstream weather provider configuration.

    The API key is read from ``WEATHER_API_KEY`` and is only ever sent to the
    provider; it never appears in responses or logs.
    """

    provider: str = Field(
        "openweathermap",
        description="Weather provider name (currently only openweathermap)",
    )
    api_key: str | None = Field(
        None,
        description="Provider API key injected as the appid query parameter",
    )
    base_url: str = Field(
        "https://api.openweathermap.org/data/2.5",
        description="Provider base URL; endpoints are resolved relative to it",
    )
    units: str = Field(
        "metric",
        description="Unit system requested from the provider",
    )
    search_type: str = Field(
        "like",
        description="Match mode for location search (like or accurate)",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Upstream request timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="WEATHER_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    trust_forwarded_for: bool = Field(
        True,
        description="Derive the client key from X-Forwarded-For when present",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on the weather proxy",
    )
    rate_limit_points: int = Field(
        10,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    rate_limit_duration_seconds: int = Field(
        60,
        description="Rate limit window length in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    rate_limit_max_keys: int = Field(
        10000,
        description="Maximum number of client windows kept in memory (LRU evicted)",
        ge=1,
    )
    rate_limit_sweep_interval_seconds: float = Field(
        60.0,
        description="Minimum interval between sweeps of expired client windows",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(
        None,
        description="Log file path when output=file (default logs/app.log)",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    weather: WeatherSettings = Field(default_factory=_build_weather_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Nested settings are created via default_factory so env loading works.
settings = Settings()
