"""Query executor: the only database capability repositories depend on.

Repositories hand it parameterized SQL with ``?`` placeholders and get plain
dict rows back, so they never touch the engine's native API.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, Sequence, TypeVar

from sqlalchemy.engine import Connection, Engine

from pocketledger.domain.errors import DatabaseNotInitializedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Tables SQLite maintains itself
SYSTEM_TABLES = ("sqlite_sequence", "sqlite_master", "sqlite_stat1")


@dataclass(frozen=True)
class QueryResult:
    """Rows of a query, or mutation metadata of a statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    changes: Optional[int] = None
    insert_id: Optional[int] = None

    def first(self) -> Optional[dict[str, Any]]:
        return self.rows[0] if self.rows else None

    def scalar(self, default: Any = None) -> Any:
        """First column of the first row."""
        row = self.first()
        if row is None:
            return default
        return next(iter(row.values()), default)


class QueryExecutor(ABC):
    """Abstract query executor interface."""

    @abstractmethod
    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """Execute one parameterized statement."""
        pass

    @abstractmethod
    def transaction(self, fn: Callable[["QueryExecutor"], T]) -> T:
        """Run ``fn`` inside a transaction.

        Commits when ``fn`` returns, rolls back when it raises. Calls nest.
        """
        pass

    @abstractmethod
    def foreign_keys_disabled(self):
        """Context manager that suspends foreign key enforcement."""
        pass

    @abstractmethod
    def table_exists(self, table_name: str) -> bool:
        """Check the catalog for a table."""
        pass

    @abstractmethod
    def list_tables(self) -> list[str]:
        """List user tables, excluding the engine's system tables."""
        pass


class SQLAlchemyQueryExecutor(QueryExecutor):
    """Query executor over a SQLAlchemy engine connected to SQLite.

    Holds one connection for the life of the process (single writer). A
    re-entrant lock serializes statements so a transaction opened by one
    caller is never interleaved with another caller's statements.
    """

    def __init__(self, engine: Optional[Engine] = None):
        """Initialize the executor.

        Args:
            engine: Engine to bind immediately. Without one, every query
                raises DatabaseNotInitializedError until ``bind`` is called.
        """
        self._engine: Optional[Engine] = None
        self._connection: Optional[Connection] = None
        self._lock = threading.RLock()
        self._depth = 0
        if engine is not None:
            self.bind(engine)

    @property
    def is_bound(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Optional[Engine]:
        return self._engine

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def bind(self, engine: Engine) -> None:
        """Bind the executor to an opened database engine."""
        with self._lock:
            if engine is self._engine:
                return
            self._release_connection()
            self._engine = engine

    def close(self) -> None:
        """Release the connection and unbind the engine.

        Queries issued afterwards raise DatabaseNotInitializedError.
        """
        with self._lock:
            self._release_connection()
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None

    def _release_connection(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def _get_connection(self) -> Connection:
        """Get the held connection, opening it if needed."""
        if self._engine is None:
            raise DatabaseNotInitializedError(
                "Database not initialized: no engine bound to the query executor"
            )
        if self._connection is None:
            self._connection = self._engine.connect()
        return self._connection

    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """Execute one statement.

        Outside a transaction each statement commits on its own.
        """
        with self._lock:
            connection = self._get_connection()
            try:
                result = connection.exec_driver_sql(sql, tuple(params) if params else None)
                if result.returns_rows:
                    query_result = QueryResult(rows=[dict(row._mapping) for row in result])
                else:
                    query_result = QueryResult(changes=result.rowcount, insert_id=result.lastrowid)
            except Exception as e:
                logger.error(f"Query failed: {e}")
                if self._depth == 0 and connection.in_transaction():
                    connection.rollback()
                raise
            if self._depth == 0:
                connection.commit()
            return query_result

    def transaction(self, fn: Callable[[QueryExecutor], T]) -> T:
        """Run ``fn(self)`` inside BEGIN/COMMIT, or a SAVEPOINT when nested."""
        with self._lock:
            connection = self._get_connection()
            if self._depth == 0:
                if connection.in_transaction():
                    connection.commit()
                tx = connection.begin()
            else:
                tx = connection.begin_nested()

            self._depth += 1
            try:
                result = fn(self)
                tx.commit()
            except Exception:
                if tx.is_active:
                    tx.rollback()
                raise
            finally:
                self._depth -= 1
            return result

    @contextmanager
    def foreign_keys_disabled(self) -> Iterator["SQLAlchemyQueryExecutor"]:
        """Turn foreign key enforcement off for the duration of the block.

        SQLite ignores the pragma inside a transaction, so it is issued on
        the driver connection while no transaction is open.

        Raises:
            RuntimeError: If called inside a transaction
        """
        with self._lock:
            if self._depth:
                raise RuntimeError("Foreign key enforcement cannot change inside a transaction")
            self._set_foreign_keys(False)
            try:
                yield self
            finally:
                self._set_foreign_keys(True)

    def _set_foreign_keys(self, enabled: bool) -> None:
        connection = self._get_connection()
        if connection.in_transaction():
            connection.commit()
        dbapi_connection = connection.connection.dbapi_connection
        dbapi_connection.execute(f"PRAGMA foreign_keys = {'ON' if enabled else 'OFF'}")

    def foreign_keys_enabled(self) -> bool:
        """Report whether foreign key enforcement is on."""
        return bool(self.execute_query("PRAGMA foreign_keys").scalar(0))

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        result = self.execute_query(
            "SELECT COUNT(*) AS count FROM sqlite_master WHERE type = 'table' AND name = ?",
            (table_name,),
        )
        return result.scalar(0) > 0

    def list_tables(self) -> list[str]:
        """List user tables, excluding SQLite's own."""
        placeholders = ", ".join("?" for _ in SYSTEM_TABLES)
        result = self.execute_query(
            f"SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT IN ({placeholders}) "
            "ORDER BY name",
            SYSTEM_TABLES,
        )
        return [row["name"] for row in result.rows]

