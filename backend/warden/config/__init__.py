"""Centralised configuration helper.

This module eliminates scattered ``os.getenv`` calls by exposing a small
:class:`Settings` container (retrieved via :func:`get_settings`).  Values come
from the process environment, optionally seeded from a ``.env`` file at the
repository root.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# ``_REPO_ROOT`` points to the top-level repository directory (one level
# **above** the "backend" package).  This file lives at
# ``backend/warden/config/__init__.py``.

_REPO_ROOT = Path(__file__).resolve().parents[3]

CONFLICT_POLICIES = ("ignore", "raise")


def _truthy(value: str | None) -> bool:  # noqa: D401 – small helper
    """Return *True* when *value* looks like an affirmative string."""

    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:  # noqa: D401 – simple data container
    """Lightweight settings container populated from environment variables."""

    # Runtime flags -----------------------------------------------------
    testing: bool
    environment: Any

    # Database ---------------------------------------------------------
    database_url: str
    sql_echo: bool

    # Logging ----------------------------------------------------------
    log_level: str

    # Grant store ------------------------------------------------------
    # What to do when two writers race on the same persisted grant:
    # "ignore" logs and reports CONFLICT_IGNORED, "raise" surfaces
    # GrantStoreConflictError to the caller.
    grant_conflict_policy: str

    @property
    def resolved_database_url(self) -> str:
        """Return the configured URL or the environment-appropriate fallback."""

        if self.database_url:
            return self.database_url
        return "sqlite:///:memory:" if self.testing else "sqlite:///./warden.db"

    # Helper for tests to override values at runtime -------------------
    def override(self, **kwargs: Any) -> None:  # pragma: no cover – test util
        for key, value in kwargs.items():
            if not hasattr(self, key):  # pragma: no cover – safety
                raise AttributeError(f"Settings has no attribute '{key}'")
            setattr(self, key, value)


def _load_settings() -> Settings:  # noqa: D401 – helper
    """Populate :class:`Settings` from environment variables."""

    node_env = os.getenv("NODE_ENV", "development")

    if node_env == "test":
        env_path = _REPO_ROOT / ".env.test"
        if not env_path.exists():
            env_path = _REPO_ROOT / ".env"  # Fallback to main .env
    else:
        env_path = _REPO_ROOT / ".env"

    if env_path.exists():
        # Explicit process env wins over the file so tests can pin values.
        load_dotenv(env_path, override=False)

    return Settings(
        testing=_truthy(os.getenv("TESTING")),
        environment=os.getenv("ENVIRONMENT"),
        database_url=os.getenv("DATABASE_URL", ""),
        sql_echo=_truthy(os.getenv("SQL_ECHO")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        grant_conflict_policy=os.getenv("GRANT_CONFLICT_POLICY", "ignore").strip().lower(),
    )


def _validate(settings: Settings) -> None:  # noqa: D401 – helper
    """Abort startup when a setting holds a value nothing understands."""

    if settings.grant_conflict_policy not in CONFLICT_POLICIES:
        raise RuntimeError(
            f"CRITICAL: GRANT_CONFLICT_POLICY must be one of {', '.join(CONFLICT_POLICIES)}; "
            f"got '{settings.grant_conflict_policy}'"
        )


def get_settings() -> Settings:  # noqa: D401 – public accessor
    """Return :class:`Settings` instance loaded from environment."""

    settings = _load_settings()
    _validate(settings)
    return settings


__all__ = [
    "CONFLICT_POLICIES",
    "Settings",
    "get_settings",
]
