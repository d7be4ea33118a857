"""
Emissions core database bindings using sqlalchemy

The reports table is the only table. It's created on initialization,
so no migrations are needed for a fresh database.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine as _Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool


DEFAULT_DATABASE_URL: str = "sqlite://"
PRINT_SQLITE_WARNING: bool = True

Base = declarative_base()
_engine: Optional[_Engine] = None
_make_session: Optional[sessionmaker] = None
_logger: logging.Logger = logging.getLogger(__name__)


def _is_in_memory(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///") or ":memory:" in database_url


def _engine_options(database_url: str, echo: bool) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": echo}
    if not database_url.startswith("sqlite:"):
        return options

    # Sessions are used from the threads of the server's thread pool
    options["connect_args"] = {"check_same_thread": False}
    if _is_in_memory(database_url):
        # Every new connection would see another empty database otherwise
        options["poolclass"] = StaticPool
        _logger.warning(
            "The in-memory sqlite3 database is shared by all threads via a single "
            "connection and is lost on exit. Use a database file to keep the reports."
        )
    if PRINT_SQLITE_WARNING:
        _logger.warning(
            "Using a sqlite database is supported for development and testing environments "
            "only. Multiple server processes should share a production-grade database server."
        )
    return options


def init(database_url: str, echo: bool = True, create_all: bool = True) -> _Engine:
    """
    Initialize the database bindings, replacing any previous bindings

    This function should be called once at startup before the report
    store accesses the database. Otherwise, a volatile in-memory database
    (see ``DEFAULT_DATABASE_URL``) will be used and a warning is emitted.

    :param database_url: the full URL to connect to the database
    :param echo: whether the SQL statements should be logged by SQLAlchemy
    :param create_all: whether the non-existing tables should be created
    :return: the newly created engine
    """

    global _engine, _make_session
    dispose()

    _engine = create_engine(database_url, **_engine_options(database_url, echo))
    if create_all:
        Base.metadata.create_all(bind=_engine)
    _make_session = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    _logger.debug(f"Database bindings initialized for {_engine.url!r}")
    return _engine


def dispose():
    """
    Close all pooled connections of the current engine and drop the bindings
    """

    global _engine, _make_session
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _make_session = None


def _ensure_bindings():
    if _engine is None or _make_session is None:
        _logger.warning(
            f"Database not initialized! Falling back to {DEFAULT_DATABASE_URL!r}, which "
            f"loses all reports on exit. Call 'init' at program startup to fix this."
        )
        init(DEFAULT_DATABASE_URL, echo=False)


def get_new_session() -> Session:
    _ensure_bindings()
    return _make_session()
