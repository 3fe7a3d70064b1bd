"""Process-wide logging setup.

Modules log through ``logging.getLogger(__name__)``; this helper only decides
the root level and how chatty SQLAlchemy is allowed to be.
"""

from __future__ import annotations

import logging

from warden.config import get_settings

_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger from ``LOG_LEVEL`` (or *level* when given)."""

    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    resolved = getattr(logging, level_name, None)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format="%(levelname)s - %(name)s - %(message)s")
    logging.getLogger("warden").setLevel(resolved)

    # SQL_ECHO already routes statements through sqlalchemy.engine; keep the
    # rest of the time quiet.
    if not settings.sql_echo:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]
