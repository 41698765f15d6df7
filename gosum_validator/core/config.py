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

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_14_4) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/84.0.4147.125 Safari/537.36"
)


class UpstreamSettings(BaseSettings):
    """Upstream source hosting configuration.

    Describes where release tags and per-release lockfiles are fetched from
    when the reference table has to be rebuilt live.
    """

    repository: str = Field(
        "devopsfaith/krakend-ce",
        description="Upstream repository in owner/name form",
    )
    api_base_url: str = Field(
        "https://api.github.com",
        description="Base URL of the REST API serving the tags listing",
    )
    raw_base_url: str = Field(
        "https://raw.githubusercontent.com",
        description="Base URL serving raw files by tag",
    )
    lockfile_name: str = Field(
        "go.sum",
        description="Lockfile path inside the upstream repository",
    )
    user_agent: str = Field(
        DEFAULT_USER_AGENT,
        description="User-Agent header sent with every upstream request",
    )
    fetch_interval_seconds: float = Field(
        180.0,
        description="Minimum spacing between two outbound upstream requests",
        gt=0,
    )
    timeout_seconds: float | None = Field(
        None,
        description="HTTP timeout for upstream requests (None waits indefinitely)",
    )

    model_config = SettingsConfigDict(
        env_prefix="UPSTREAM_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    versions_file: str = Field(
        "versions.json",
        description="Cached reference table read once at startup",
    )
    max_lockfile_size_kb: int = Field(
        1024,
        description="Maximum accepted lockfile body size in kilobytes",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
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
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.

    Environments:
    - development: Local development
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
