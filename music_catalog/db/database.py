# music_catalog/db/database.py
"""
Database engine and session management.
The whole process shares one SQLAlchemy engine (and its connection pool);
every request gets its own Session.
"""

import logging
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_sqlite_functions(dbapi_conn, connection_record) -> None:
    # SQLite's built-in lower() only folds ASCII, and ILIKE is rendered as lower() LIKE lower()
    dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across FastAPI's worker threads, and an
    in-memory database has to live on a single connection to survive.
    """
    kwargs = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _register_sqlite_functions)
        return engine
    return create_engine(url, **kwargs)


def init_db(engine: Engine) -> None:
    """Create missing tables."""
    # imported for its side effect of registering the tables on Base.metadata
    from music_catalog.db import models  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database migrated successfully")


class DatabaseManager:
    """
    Process-wide holder for the engine and session factory.
    Call configure() on startup and dispose() on shutdown.
    """
    _engine: Engine | None = None
    _session_factory: sessionmaker | None = None

    @classmethod
    def configure(cls, url: str, echo: bool = False) -> Engine:
        cls.dispose()
        cls._engine = create_db_engine(url, echo=echo)
        cls._session_factory = sessionmaker(bind=cls._engine, expire_on_commit=False)
        logger.info(f"Database engine configured for {cls._engine.url.render_as_string(hide_password=True)}")
        return cls._engine

    @classmethod
    def session(cls) -> Session:
        if cls._session_factory is None:
            raise RuntimeError("Database is not configured, call DatabaseManager.configure() first")
        return cls._session_factory()

    @classmethod
    def dispose(cls) -> None:
        """Close pooled connections. Safe to call when not configured."""
        if cls._engine is not None:
            cls._engine.dispose()
        cls._engine = None
        cls._session_factory = None


def get_session() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""
    session = DatabaseManager.session()
    try:
        yield session
    finally:
        session.close()
