"""
Application Configuration.

Pydantic Settings model for the EnviroLens client.  All configuration is
loaded from environment variables and ``.env`` files.  Inject an
``AppConfig`` instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase (identity provider + document store) ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")
    USERS_TABLE: str = "users"

    # --- Local storage ---
    SQLITE_PATH: str = "envirolens_local.db"

    # --- Credential vault ---
    VAULT_SERVICE_NAME: str = "com.enviroLens.login"
    VAULT_KDF_ITERATIONS: int = 600_000

    # --- Biometrics ---
    BIOMETRIC_REASON: str = "Authenticate with Face ID"

    # --- Registration ---
    REGISTRATION_AREAS: list[str] = Field(default_factory=lambda: [
        "Colombo",
        "Galle",
        "Kandy",
        "Jaffna",
        "Matara",
    ])

    # --- Logging ---
    LOG_FILE: str = "envirolens.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing,
        so the warning is the only hint that the client is running with
        placeholder values.
        """
        _log = logging.getLogger("envirolens.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found: all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL:
            _log.warning(
                "SUPABASE_URL is empty. Sign-in, registration and username "
                "lookup will fail until it is configured."
            )

        return self


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    Uses a check-lock-check pattern so the fast path skips the lock while
    first initialisation stays thread-safe.  Prefer constructor injection
    of ``AppConfig`` in new code.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
