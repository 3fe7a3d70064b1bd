import logging
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Engine
from sqlalchemy import create_engine
from sqlalchemy import event
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from warden.config import get_settings

logger = logging.getLogger(__name__)

_settings = get_settings()

# Create Base class
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):  # noqa: D401 – event hook
    """Turn on FK enforcement; SQLite ships with it disabled per connection."""

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(db_url: str, **kwargs) -> Engine:
    """Create a SQLAlchemy engine with the given URL and options.

    Args:
        db_url: Database connection URL
        **kwargs: Additional arguments for create_engine

    Returns:
        A SQLAlchemy Engine instance
    """
    connect_args = kwargs.pop("connect_args", {})
    if "sqlite" in db_url:
        # Async store wrappers hop onto worker threads.
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", 30)

    kwargs.setdefault("echo", _settings.sql_echo)

    engine = create_engine(db_url, connect_args=connect_args, **kwargs)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


def make_sessionmaker(engine: Engine) -> sessionmaker:
    """Create a sessionmaker bound to the given engine.

    Args:
        engine: SQLAlchemy Engine instance

    Returns:
        A sessionmaker class
    """
    # Stores map rows to pydantic models before the session closes, but
    # crud helpers hand entities back to callers; ``expire_on_commit=False``
    # keeps those readable after commit.
    return sessionmaker(
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


# Default engine and sessionmaker instances for app usage.  Tests overwrite
# ``warden.database.default_session_factory`` or pass their own factory to
# each store.
default_engine = make_engine(_settings.resolved_database_url)
default_session_factory = make_sessionmaker(default_engine)


def get_session_factory() -> sessionmaker:
    """Return the process-wide session factory."""

    return default_session_factory


@contextmanager
def db_session(session_factory: Any = None):
    """Unit of work for a single store operation.

    1. Auto-commit on success
    2. Auto-rollback on error
    3. Always close session

    Usage:
        with db_session(factory) as db:
            db.add(entity)
            # Automatic commit + close

    Args:
        session_factory: Optional custom session factory

    Yields:
        SQLAlchemy Session object with automatic lifecycle management
    """
    factory = session_factory or get_session_factory()
    session = factory()

    try:
        yield session
        session.commit()
        logger.debug("Database session committed successfully")

    except Exception as e:
        session.rollback()
        logger.error("Database session rolled back due to error: %s", e)
        raise

    finally:
        session.close()
        logger.debug("Database session closed")


def initialize_database(engine: Engine = None) -> None:
    """Create all tables using the given engine (default engine if omitted)."""

    # Register every mapped class with ``Base.metadata`` before create_all.
    import warden.models.models  # noqa: F401

    target_engine = engine or default_engine
    Base.metadata.create_all(bind=target_engine)


def drop_database(engine: Engine = None) -> None:
    """Drop all tables known to ``Base.metadata``."""

    import warden.models.models  # noqa: F401

    target_engine = engine or default_engine
    Base.metadata.drop_all(bind=target_engine)
