"""Database layer: query executor, schema registry, repositories and lifecycle."""

from pocketledger.database.executor import QueryExecutor, QueryResult, SQLAlchemyQueryExecutor
from pocketledger.database.factories import create_sqlite_engine, create_sqlite_executor

__all__ = [
    "QueryExecutor",
    "QueryResult",
    "SQLAlchemyQueryExecutor",
    "create_sqlite_engine",
    "create_sqlite_executor",
]
