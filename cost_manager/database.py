"""Database configuration for the cost manager service."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import load_settings

SQLITE_BUSY_TIMEOUT = 30.0


def make_engine(url: str, **kwargs: Any) -> Engine:
    """Create an engine; SQLite engines get real BEGIN/SAVEPOINT handling."""
    if not url.startswith("sqlite"):
        return create_engine(url, future=True, **kwargs)

    sqlite_engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
        future=True,
        **kwargs,
    )

    # pysqlite defers BEGIN until the first DML statement, which breaks the
    # savepoints used for report replacement; take over transaction control.
    # Transactions take the write lock up front so a report read and its
    # replacement never need a SHARED to RESERVED upgrade.
    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, _record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(connection) -> None:
        connection.exec_driver_sql("BEGIN IMMEDIATE")

    return sqlite_engine


DATABASE_URL = load_settings().database_url

engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)

Base = declarative_base()


def init_db() -> None:
    """Create database tables if they do not already exist."""
    from . import models  # noqa: F401  # Import models for metadata registration

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Iterator[Session]:
    """FastAPI dependency that provides a database session."""
    with session_scope() as session:
        yield session
