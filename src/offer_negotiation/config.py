"""Centralized, typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and environment
variables, a cached ``get_settings()`` accessor, and a ``validate_settings()``
startup gate that enforces production requirements.

This module has ZERO imports from the ``offer_negotiation`` package to
prevent circular imports.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env`` file.

    ``SecretStr`` fields prevent accidental leaks in logs or error output.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    http_host: str = "0.0.0.0"
    http_port: int = 8000

    # -- Storage ---------------------------------------------------------------
    database_path: Path = Path("data/offers.db")

    # -- Auth gateway ----------------------------------------------------------
    # Header carrying the user id the upstream gateway already authenticated.
    auth_user_header: str = "X-User-Id"

    # -- Observability ---------------------------------------------------------
    sentry_dsn: SecretStr = SecretStr("")


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Only the structured errors list -- the exception text may carry secrets.
        logger.error("settings_validation_failed", errors=exc.errors())
        sys.exit(1)


def validate_settings(settings: Settings) -> None:
    """Enforce production requirements at startup.

    In **production** mode, missing requirements print an error block and
    exit.  In **development** mode each one is logged as a warning and
    startup continues.

    Args:
        settings: The loaded application settings.
    """
    errors: list[str] = []

    if not settings.sentry_dsn.get_secret_value():
        errors.append("SENTRY_DSN is empty or not set")

    if str(settings.database_path) == ":memory:":
        errors.append("DATABASE_PATH points at an in-memory database")

    if not settings.auth_user_header.strip():
        errors.append("AUTH_USER_HEADER is empty")

    if not errors:
        logger.info("settings_validation_passed")
        return

    if settings.production:
        for err in errors:
            logger.error("setting_missing", detail=err)
        print("\n=== STARTUP FAILED ===", file=sys.stderr)
        print("Invalid settings for production mode:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        print("======================\n", file=sys.stderr)
        sys.exit(1)
    else:
        for err in errors:
            logger.warning("setting_missing_dev", detail=err)
