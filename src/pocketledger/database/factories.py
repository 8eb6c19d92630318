"""Factory functions for creating engines and query executors."""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from pocketledger.config import load_settings
from pocketledger.database.executor import SQLAlchemyQueryExecutor

MEMORY_DATABASE = ":memory:"


def create_sqlite_engine(database_path: Optional[str] = None) -> Engine:
    """Create a SQLAlchemy engine for a SQLite file.

    The driver's own transaction handling is switched off so that SQLAlchemy
    emits BEGIN itself; this makes DDL (DROP/CREATE TABLE) and SAVEPOINTs
    transactional, which a reset relies on to roll back cleanly.

    Args:
        database_path: Path to SQLite database file, or ":memory:". If None,
            checks POCKETLEDGER_DB_PATH, then defaults to
            ~/.pocketledger/pocketledger.db

    Returns:
        Engine with foreign keys enforced on every connection
    """
    if database_path is None:
        database_path = load_settings().database_path

    if database_path == MEMORY_DATABASE:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        engine = create_engine(
            f"sqlite:///{database_path}",
            connect_args={"check_same_thread": False},
            echo=False,
        )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys = ON")

    @event.listens_for(engine, "begin")
    def _on_begin(connection):
        connection.exec_driver_sql("BEGIN")

    return engine


def create_sqlite_executor(database_path: Optional[str] = None) -> SQLAlchemyQueryExecutor:
    """Create a query executor bound to a SQLite database."""
    return SQLAlchemyQueryExecutor(create_sqlite_engine(database_path))
