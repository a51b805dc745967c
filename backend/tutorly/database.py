# backend/tutorly/database.py
"""
Database engine and session construction.

The engine and session factory are built once by the application factory
and stored on ``app.state``; nothing here opens a connection at import time.
"""

from datetime import datetime
import logging
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

logger = logging.getLogger(__name__)


Base: DeclarativeMeta = declarative_base()


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite (used by tests and local tooling) gets a single shared connection
    for in-memory databases; server databases get a bounded QueuePool.
    """
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=echo, future=True, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_sqlite_fks(dbapi_connection: Any, connection_record: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    engine = create_engine(
        database_url,
        echo=echo,
        future=True,
        poolclass=QueuePool,
        pool_size=10,  # Number of persistent connections
        max_overflow=10,  # Maximum overflow connections
        pool_timeout=30,  # Timeout for getting connection
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Test connections before using
        connect_args={"connect_timeout": 10, "application_name": "tutorly_backend"},
    )

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
        connection_record.info["connect_time"] = datetime.now()
        logger.debug("Database connection established")

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    """Session factory used for one session per request."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
