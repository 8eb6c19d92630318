"""Database lifecycle: initialization, reset and the data-clear path.

Initialization and reset both mutate the schema, so they are the only
operations that carry a mutual-exclusion guard. Concurrent and repeat
``initialize`` calls share a single pass; a ``reset`` that finds either
operation running is refused outright.
"""

import logging
import threading
from typing import Optional

from sqlalchemy.engine import Engine

from pocketledger.config import Settings
from pocketledger.database.executor import QueryExecutor, SQLAlchemyQueryExecutor
from pocketledger.database.factories import create_sqlite_engine
from pocketledger.database.repositories.category import CategoryRepository
from pocketledger.database.schema import SCHEMAS, TableDefinition, creation_order, drop_order
from pocketledger.domain.defaults import DEFAULT_CATEGORIES
from pocketledger.domain.entities import InitializationResult
from pocketledger.domain.errors import ConcurrentOperationError
from pocketledger.domain.events import DatabaseResetEvent, EventBus

logger = logging.getLogger(__name__)


class DatabaseLifecycleManager:
    """Owns the initialization state of one database."""

    def __init__(
        self,
        executor: SQLAlchemyQueryExecutor,
        settings: Settings,
        event_bus: Optional[EventBus] = None,
        schemas: tuple[TableDefinition, ...] = SCHEMAS,
    ):
        """Initialize lifecycle manager.

        Args:
            executor: Query executor to bind and run DDL through
            settings: Database path and the data-clear flag
            event_bus: Bus that receives DatabaseResetEvent after a reset
            schemas: Table registry
        """
        self.executor = executor
        self.settings = settings
        self.event_bus = event_bus
        self.schemas = schemas
        self._init_lock = threading.Lock()
        self._reset_lock = threading.Lock()
        self._result: Optional[InitializationResult] = None
        self._initializing = False

    @property
    def is_initialized(self) -> bool:
        return self._result is not None

    @property
    def is_initializing(self) -> bool:
        return self._initializing

    @property
    def is_resetting(self) -> bool:
        return self._reset_lock.locked()

    @property
    def result(self) -> Optional[InitializationResult]:
        return self._result

    def initialize(self, engine: Optional[Engine] = None) -> InitializationResult:
        """Bind the executor, create missing tables and seed defaults.

        Runs once per manager. Callers arriving while the first pass runs
        wait for it and receive the same result, as do later callers.

        Args:
            engine: Engine to bind. If None and the executor is unbound, one
                is created for ``settings.database_path``.

        Returns:
            Result of the single initialization pass
        """
        if self._result is not None:
            return self._result

        with self._init_lock:
            if self._result is not None:
                return self._result
            self._initializing = True
            try:
                self._result = self._initialize(engine)
            finally:
                self._initializing = False
            return self._result

    def _initialize(self, engine: Optional[Engine]) -> InitializationResult:
        self._bind(engine)

        cleared: tuple[str, ...] = ()
        if self.settings.data_clear:
            cleared = self.clear_all_tables()

        created = self.executor.transaction(self._create_missing_tables)
        if created:
            logger.info(f"Created tables: {', '.join(created)}")

        seeded = 0
        categories = CategoryRepository(self.executor)
        if categories.count() == 0:
            seeded = self.executor.transaction(self._seed_default_categories)
            logger.info(f"Seeded {seeded} default categories")

        return InitializationResult(
            created_tables=tuple(created),
            seeded_categories=seeded,
            cleared_tables=cleared,
        )

    def _bind(self, engine: Optional[Engine]) -> None:
        if engine is not None:
            self.executor.bind(engine)
        elif not self.executor.is_bound:
            self.executor.bind(create_sqlite_engine(self.settings.database_path))

    def _create_missing_tables(self, executor: QueryExecutor) -> list[str]:
        created = []
        for schema in creation_order(self.schemas):
            if not executor.table_exists(schema.name):
                executor.execute_query(schema.ddl)
                created.append(schema.name)
            for statement in schema.index_ddl:
                executor.execute_query(statement)
        return created

    def _seed_default_categories(self, executor: QueryExecutor) -> int:
        """Insert default categories whose name is not taken yet.

        Returns:
            Number of categories inserted
        """
        categories = CategoryRepository(executor)
        existing = categories.existing_names()
        seeded = 0
        for sort_order, (name, category_type, icon, color) in enumerate(DEFAULT_CATEGORIES):
            if name in existing:
                continue
            categories.create(
                name=name,
                type=category_type,
                icon=icon,
                color=color,
                sort_order=sort_order,
                is_default=True,
            )
            existing.add(name)
            seeded += 1
        return seeded

    def clear_all_tables(self) -> tuple[str, ...]:
        """Drop every user table in the database, registered or not.

        Foreign key enforcement is off while the tables are dropped.

        Returns:
            Names of the dropped tables
        """
        tables = tuple(self.executor.list_tables())
        if not tables:
            return tables

        def drop(executor: QueryExecutor) -> None:
            for table in tables:
                executor.execute_query(f'DROP TABLE IF EXISTS "{table}"')

        with self.executor.foreign_keys_disabled():
            self.executor.transaction(drop)
        logger.info(f"Cleared tables: {', '.join(tables)}")
        return tables

    def reset(self) -> InitializationResult:
        """Drop, recreate and reseed every registered table in one transaction.

        If any step fails the transaction rolls back and the previous tables
        and data stay as they were.

        Returns:
            Result describing the rebuilt schema

        Raises:
            ConcurrentOperationError: If a reset or an initialization is
                already running
        """
        if not self._reset_lock.acquire(blocking=False):
            raise ConcurrentOperationError("Database reset already in progress")
        try:
            if not self._init_lock.acquire(blocking=False):
                raise ConcurrentOperationError("Database initialization in progress")
            try:
                self._bind(None)
                logger.info("Resetting database")
                with self.executor.foreign_keys_disabled():
                    seeded = self.executor.transaction(self._rebuild)
                result = InitializationResult(
                    created_tables=tuple(schema.name for schema in creation_order(self.schemas)),
                    seeded_categories=seeded,
                )
                self._result = result
            finally:
                self._init_lock.release()
        finally:
            self._reset_lock.release()

        logger.info(f"Database reset complete, seeded {result.seeded_categories} categories")
        if self.event_bus is not None:
            self.event_bus.publish(DatabaseResetEvent())
        return result

    def _rebuild(self, executor: QueryExecutor) -> int:
        for schema in drop_order(self.schemas):
            executor.execute_query(schema.drop_sql())
        for schema in creation_order(self.schemas):
            executor.execute_query(schema.ddl)
            for statement in schema.index_ddl:
                executor.execute_query(statement)
        return self._seed_default_categories(executor)
