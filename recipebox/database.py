"""Database connection and session management."""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings

logger = logging.getLogger(__name__)


def _configure_sqlite_connection(dbapi_connection, connection_record):
    """Turn on FK enforcement and hand transaction control to SQLAlchemy.

    pysqlite defers BEGIN until the first DML statement, which breaks
    SAVEPOINT. With its own handling switched off, BEGIN is emitted from the
    engine "begin" event instead.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    dbapi_connection.isolation_level = None


def _begin_sqlite_transaction(conn):
    conn.exec_driver_sql("BEGIN")


def create_db_engine(database_url: str | None = None, **kwargs) -> Engine:
    """Create SQLAlchemy engine for the configured database."""
    settings = get_settings()
    url = database_url or settings.database_url

    options = {
        "echo": settings.sql_echo,  # Set to True for SQL debugging
        "pool_pre_ping": True,  # Verify connections before using
    }
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    options.update(kwargs)

    engine = create_engine(url, **options)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _begin_sqlite_transaction)
    return engine


# Create engine and session factory
engine = create_db_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables and the full-text index on a fresh database.

    Alembic owns the schema in deployed databases; this is used for local
    development and tests.
    """
    from . import models  # noqa: F401  (registers mappers)
    from .fts import create_fts_index
    from .models import Base

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    with bind.begin() as conn:
        create_fts_index(conn)


def get_db() -> Generator[Session, None, None]:
    """Dependency for FastAPI endpoints that need a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with get_db_session() as db:
            db.query(...)
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_database_health(db: Session | None = None) -> bool:
    """Verify database connection is working.

    Returns:
        True if database is healthy, False otherwise.
    """
    try:
        if db is not None:
            db.execute(text("SELECT 1"))
        else:
            with get_db_session() as session:
                session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


def dispose_engine() -> None:
    """Dispose of the engine and all connections.

    Call this during graceful shutdown.
    """
    engine.dispose()


def list_tables() -> list[str]:
    """List all tables in the database.

    Returns:
        List of table names.
    """
    try:
        with get_db_session() as db:
            result = db.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name")
            )
            return [row[0] for row in result.fetchall()]
    except SQLAlchemyError as e:
        logger.error(f"Failed to list tables: {e}")
        return []
