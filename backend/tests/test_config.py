import logging

import pytest

from warden.config import get_settings
from warden.utils.log import configure_logging


def test_defaults(monkeypatch):
    monkeypatch.delenv("GRANT_CONFLICT_POLICY", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    settings = get_settings()

    assert settings.grant_conflict_policy == "ignore"
    assert settings.log_level == "INFO"
    assert settings.testing is True


def test_conflict_policy_is_normalised(monkeypatch):
    monkeypatch.setenv("GRANT_CONFLICT_POLICY", "  RAISE ")

    assert get_settings().grant_conflict_policy == "raise"


def test_unknown_conflict_policy_fails_fast(monkeypatch):
    monkeypatch.setenv("GRANT_CONFLICT_POLICY", "retry")

    with pytest.raises(RuntimeError, match="GRANT_CONFLICT_POLICY"):
        get_settings()


def test_database_url_fallbacks(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)

    settings = get_settings()
    assert settings.resolved_database_url == "sqlite:///:memory:"

    settings.override(testing=False)
    assert settings.resolved_database_url == "sqlite:///./warden.db"

    settings.override(database_url="postgresql://db/warden")
    assert settings.resolved_database_url == "postgresql://db/warden"


def test_configure_logging_sets_levels(monkeypatch):
    monkeypatch.delenv("SQL_ECHO", raising=False)

    configure_logging("debug")

    assert logging.getLogger("warden").level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    configure_logging("not-a-level")
    assert logging.getLogger("warden").level == logging.INFO
