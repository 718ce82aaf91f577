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

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_auth_settings() -> "AuthSettings":
    """Build auth settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return AuthSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


def _build_client_settings() -> "ClientSettings":
    return ClientSettings()  # type: ignore[call-arg]


class AuthSettings(BaseSettings):
    """Bearer token and login throttling configuration."""

    jwt_secret: str = Field(
        ...,
        description="Secret used to sign bearer tokens (HS256)",
    )
    jwt_algorithm: str = Field(
        "HS256",
        description="JWT signing algorithm",
    )
    token_ttl_days: int = Field(
        30,
        description="Bearer token lifetime in days",
        ge=1,
    )
    login_max_failures: int = Field(
        5,
        description="Failed logins per client address before lockout",
        ge=1,
    )
    login_cooldown_seconds: int = Field(
        15 * 60,
        description="Lockout window measured from the last failed login",
        ge=1,
    )
    login_guard_max_records: int | None = Field(
        10_000,
        description="Maximum tracked client addresses (None for unbounded)",
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    cors_origins: str = Field(
        "http://localhost:3000,http://127.0.0.1:3000",
        description="Comma-separated list of origins allowed by CORS",
    )
    products_page_size: int = Field(
        10,
        description="Products returned per page by the listing endpoint",
        ge=1,
    )
    featured_products_limit: int = Field(
        8,
        description="Maximum number of featured products returned",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable global rate limiting per client address",
    )
    rate_limit_requests: int = Field(
        300,
        description="Maximum number of requests allowed per window (per client address)",
        ge=1,
    )
    rate_limit_window_seconds: int = Field(
        15 * 60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    auth_rate_limit_requests: int = Field(
        20,
        description="Failed login/registration calls allowed per window (per client address)",
        ge=1,
    )
    auth_rate_limit_window_seconds: int = Field(
        15 * 60,
        description="Auth rate limit window size in seconds",
        ge=1,
    )
    max_body_bytes: int = Field(
        10 * 1024,
        description="Largest accepted request body (Content-Length) in bytes",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header carrying the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class ClientSettings(BaseSettings):
    """Storefront client configuration (state store and request queue)."""

    base_url: str = Field(
        "http://localhost:5000",
        description="Base URL of the storefront API",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Per-request timeout in seconds",
    )
    queue_delay_seconds: float = Field(
        0.3,
        description="Pause between two queued requests",
        ge=0,
    )
    storage_path: str | None = Field(
        None,
        description="JSON file used as durable local storage (in-memory when unset)",
    )

    model_config = SettingsConfigDict(
        env_prefix="CLIENT_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if required settings are missing.
    """

    app_env: str = APP_ENV
    auth: AuthSettings = Field(default_factory=_build_auth_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)
    client: ClientSettings = Field(default_factory=_build_client_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
