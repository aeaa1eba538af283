"""Centralized, typed configuration using pydantic-settings.

Provides a single frozen ``Settings`` class backed by ``.env`` file and
environment variables, a cached ``get_settings()`` accessor, and a
``validate_credentials()`` startup gate that enforces delivery credential
presence in production mode.

IMPORTANT: This module has ZERO imports from the ``contact_relay`` package to
prevent circular imports.  Only stdlib, pydantic, pydantic_settings, and
structlog are used.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import Annotated, Any

import structlog
from pydantic import SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env`` file.

    The instance is frozen: it is built once at startup and passed by
    reference into the request handler.  ``SecretStr`` fields prevent
    accidental leaks in logs or error output.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    port: int = 8000
    outbound_timeout_seconds: float = 10.0

    # -- Resend (required for delivery) -----------------------------------------
    resend_api_key: SecretStr = SecretStr("")
    contact_to_email: str = ""
    contact_from_email: str = ""

    # -- Turnstile (optional) ----------------------------------------------------
    turnstile_secret_key: SecretStr = SecretStr("")

    # -- CORS --------------------------------------------------------------------
    allowed_origins: Annotated[tuple[str, ...], NoDecode] = ()

    # -- Sentry ------------------------------------------------------------------
    sentry_dsn: str = ""

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        """Accept a comma-separated string (the env var form) or a sequence."""
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    @property
    def captcha_enabled(self) -> bool:
        """True when a Turnstile secret is configured."""
        return bool(self.turnstile_secret_key.get_secret_value())


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    The ``@lru_cache`` decorator ensures environment variables are parsed
    exactly once.  Call ``get_settings.cache_clear()`` in tests to reset.

    Returns:
        The application ``Settings``.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Log only the structured errors list -- never the full exception
        # which may contain raw SecretStr values.
        logger.error("settings_validation_failed", errors=exc.errors(include_input=False))
        sys.exit(1)


def missing_delivery_settings(settings: Settings) -> list[str]:
    """Return the env var names of required delivery settings that are empty.

    Args:
        settings: The loaded application settings.

    Returns:
        A list such as ``["RESEND_API_KEY", "CONTACT_TO_EMAIL"]``; empty when
        every required setting is present.
    """
    missing: list[str] = []
    if not settings.resend_api_key.get_secret_value():
        missing.append("RESEND_API_KEY")
    if not settings.contact_to_email:
        missing.append("CONTACT_TO_EMAIL")
    if not settings.contact_from_email:
        missing.append("CONTACT_FROM_EMAIL")
    return missing


def validate_credentials(settings: Settings) -> None:
    """Enforce delivery credential presence at startup.

    In **production** mode (``settings.production is True``), the application
    exits with a clear error block if any required credential is missing.

    In **development** mode, each missing credential is logged as a warning
    but the application continues to start; every send attempt then fails
    with ``ConfigError``.

    Args:
        settings: The loaded application settings.
    """
    errors = [f"{name} is empty or not set" for name in missing_delivery_settings(settings)]

    if not errors:
        logger.info("credential_validation_passed", captcha_enabled=settings.captcha_enabled)
        return

    if settings.production:
        for err in errors:
            logger.error("credential_missing", detail=err)
        print("\n=== STARTUP FAILED ===", file=sys.stderr)
        print("Missing required credentials for production mode:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        print("======================\n", file=sys.stderr)
        sys.exit(1)
    else:
        for err in errors:
            logger.warning("credential_missing_dev", detail=err)
