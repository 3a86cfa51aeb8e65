"""
Application Configuration.

Pydantic Settings model for the SecuryFlex authentication core.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings

from securyflex.models.auth_models import DemoAccount
from securyflex.models.enums import Environment, UserType


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # --- Identity provider / profile store (Supabase) ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")
    PROFILES_TABLE: str = "profiles"
    PASSWORD_RESET_REDIRECT_URL: str = ""

    # --- Demo accounts (development only, refused in production) ---
    DEMO_MODE_ENABLED: bool = False
    DEMO_GUARD_EMAIL: str = ""
    DEMO_GUARD_PASSWORD: SecretStr = SecretStr("")
    DEMO_COMPANY_EMAIL: str = ""
    DEMO_COMPANY_PASSWORD: SecretStr = SecretStr("")
    DEMO_ADMIN_EMAIL: str = ""
    DEMO_ADMIN_PASSWORD: SecretStr = SecretStr("")

    # --- Rate limiting (rolling window per identifier) ---
    LOGIN_WINDOW_MINUTES: int = 15
    LOGIN_MAX_ATTEMPTS: int = 3
    REGISTRATION_WINDOW_MINUTES: int = 60
    REGISTRATION_MAX_ATTEMPTS: int = 3

    # --- Account lockout ---
    LOCKOUT_MAX_FAILED_LOGINS: int = 5
    LOCKOUT_HOURS: int = 24

    # --- Session timeouts ---
    SESSION_IDLE_TIMEOUT_MINUTES: int = 30
    SESSION_ABSOLUTE_TIMEOUT_HOURS: int = 8

    # --- Resend cooldowns ---
    EMAIL_VERIFICATION_COOLDOWN_MINUTES: int = 2
    PASSWORD_RESET_COOLDOWN_MINUTES: int = 5

    # --- Terms of service ---
    TERMS_VERSION: str = "2025.1"

    # --- Logging ---
    LOG_FILE: str = "securyflex_auth.log"
    LOG_LEVEL: str = "INFO"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _refuse_demo_in_production(self) -> "AppConfig":
        """Demo accounts bypass the identity provider; never in production."""
        if self.DEMO_MODE_ENABLED and self.ENVIRONMENT == Environment.PRODUCTION:
            raise ValueError(
                "DEMO_MODE_ENABLED must be false when ENVIRONMENT=production"
            )
        return self

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing.
        This validator logs a warning so operators know the core is running
        without an identity provider or with demo accounts switched on.
        """
        _log = logging.getLogger("securyflex.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.is_provider_configured:
            _log.warning(
                "SUPABASE_URL / SUPABASE_ANON_KEY are empty; authentication "
                "requests will be rejected as not configured."
            )

        if self.DEMO_MODE_ENABLED:
            _log.warning(
                "DEMO_MODE_ENABLED is on; configured demo accounts can sign "
                "in without the identity provider."
            )

        return self

    # --- Derived values ---

    @property
    def is_provider_configured(self) -> bool:
        """``True`` when both the Supabase URL and anon key are set."""
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY.get_secret_value())

    def demo_accounts(self) -> dict[str, DemoAccount]:
        """Return configured demo accounts keyed by lowercased e-mail.

        Empty unless ``DEMO_MODE_ENABLED`` is set.  An account is only
        included when both its e-mail and password are configured.
        """
        if not self.DEMO_MODE_ENABLED:
            return {}

        candidates = (
            (self.DEMO_GUARD_EMAIL, self.DEMO_GUARD_PASSWORD, UserType.GUARD, "Demo Beveiliger"),
            (self.DEMO_COMPANY_EMAIL, self.DEMO_COMPANY_PASSWORD, UserType.COMPANY, "Demo Bedrijf"),
            (self.DEMO_ADMIN_EMAIL, self.DEMO_ADMIN_PASSWORD, UserType.ADMIN, "Demo Admin"),
        )
        accounts: dict[str, DemoAccount] = {}
        for email, password, user_type, name in candidates:
            if email.strip() and password.get_secret_value():
                key = email.strip().lower()
                accounts[key] = DemoAccount(
                    email=key,
                    password=password,
                    user_type=user_type,
                    name=name,
                )
        return accounts

    @property
    def is_demo_mode_enabled(self) -> bool:
        """Demo mode is effective only when at least one account exists."""
        return bool(self.demo_accounts())


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern to avoid the lock overhead on the fast path while remaining
    thread-safe during first initialisation.

    Prefer direct constructor injection of ``AppConfig`` in new code;
    this factory exists for modules (such as the logger) that need
    configuration before the composition root has run.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
