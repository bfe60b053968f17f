"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields.  In a
production deployment you should override these via environment
variables or a dedicated configuration service.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Sitter Board API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Path to the SQLite file backing the key‑value store.  Relative
    # paths are resolved against the package root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "sitter_board.db")

    # Whether students may still apply once a notice is filled or
    # closed.  Off by default: a filled notice stops taking applications.
    allow_applications_when_filled: bool = _env_flag("ALLOW_APPLICATIONS_WHEN_FILLED")

    # How many times a notice update is retried after losing a
    # compare‑and‑swap race before giving up with a conflict.
    update_max_retries: int = int(os.getenv("UPDATE_MAX_RETRIES", "5"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
