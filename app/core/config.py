"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production injects via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file and not os.getenv("TESTING"):
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    BaseSettings reads its fields from the environment; static type checkers
    still treat them as constructor arguments, hence the type ignore.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_store_settings() -> "StoreSettings":
    return StoreSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class StoreSettings(BaseSettings):
    """Signup persistence configuration.

    The Supabase backend talks to a PostgREST table; the memory backend keeps
    rows in-process and is meant for local development and tests.
    """

    backend: str = Field(
        "supabase",
        description="Signup store backend: 'supabase' or 'memory'",
    )
    supabase_url: str | None = Field(
        None,
        description="Supabase project URL",
        validation_alias=AliasChoices("STORE_SUPABASE_URL", "SUPABASE_URL"),
    )
    supabase_key: str | None = Field(
        None,
        description="Supabase service role key (server-side only)",
        validation_alias=AliasChoices(
            "STORE_SUPABASE_KEY", "SUPABASE_SERVICE_ROLE_KEY"
        ),
    )
    table: str = Field(
        "signups",
        description="Table holding signup rows",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        case_sensitive=False,
        populate_by_name=True,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    admin_password: str | None = Field(
        None,
        description="Shared secret required as Bearer token on /admin-signups",
        validation_alias=AliasChoices("APP_ADMIN_PASSWORD", "ADMIN_PASSWORD"),
    )
    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated list of allowed CORS origins",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client-address rate limiting on /signup",
    )
    rate_limit_requests: int = Field(
        5,
        description="Maximum number of signup requests allowed per window (per address)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        60,
        description="Sliding window size in seconds",
        ge=1,
    )
    rate_limit_max_keys: int = Field(
        10000,
        description="Maximum number of client addresses tracked before LRU eviction",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        populate_by_name=True,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept/propagate the request correlation id",
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
    app: AppSettings = Field(default_factory=_build_app_settings)
    store: StoreSettings = Field(default_factory=_build_store_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
