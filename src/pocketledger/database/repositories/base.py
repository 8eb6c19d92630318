"""Shared repository behavior over the query executor."""

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from pocketledger.database.executor import QueryExecutor
from pocketledger.domain.patches import Patch
from pocketledger.utils.values import to_db

E = TypeVar("E")


class Repository(ABC, Generic[E]):
    """Base repository: lookups, counts, deletes and allow-listed updates.

    Subclasses name their table, the patch type whose fields are the
    updatable columns, and how a row maps to an entity.
    """

    table: str = ""
    patch_type: type[Patch] = Patch
    # Columns written by the repository itself, never by callers
    derived_columns: tuple[str, ...] = ()
    order_by: str = "id"

    def __init__(self, executor: QueryExecutor):
        """Initialize repository.

        Args:
            executor: Query executor shared by all repositories
        """
        self.executor = executor

    @abstractmethod
    def _to_entity(self, row: Mapping[str, Any]) -> E:
        pass

    @property
    def updatable_columns(self) -> tuple[str, ...]:
        return self.patch_type.updatable_fields() + self.derived_columns

    def _query(self, sql: str, params: Sequence[Any] = ()) -> list[E]:
        result = self.executor.execute_query(sql, [to_db(p) for p in params])
        return [self._to_entity(row) for row in result.rows]

    def _query_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[E]:
        entities = self._query(sql, params)
        return entities[0] if entities else None

    def _scalar(self, sql: str, params: Sequence[Any] = (), default: Any = None) -> Any:
        result = self.executor.execute_query(sql, [to_db(p) for p in params])
        value = result.scalar(default)
        return default if value is None else value

    def find_by_id(self, entity_id: int) -> Optional[E]:
        """Get entity by ID.

        Returns:
            Entity or None if not found
        """
        return self._query_one(f"SELECT * FROM {self.table} WHERE id = ?", (entity_id,))

    def find_all(self) -> list[E]:
        """List every row in the table's default order."""
        return self._query(f"SELECT * FROM {self.table} ORDER BY {self.order_by}")

    def count(self) -> int:
        return self._scalar(f"SELECT COUNT(*) AS count FROM {self.table}", default=0)

    def exists(self, entity_id: int) -> bool:
        return bool(
            self._scalar(f"SELECT COUNT(*) FROM {self.table} WHERE id = ?", (entity_id,), default=0)
        )

    def delete(self, entity_id: int) -> bool:
        """Delete a row.

        Returns:
            True if a row was deleted
        """
        result = self.executor.execute_query(f"DELETE FROM {self.table} WHERE id = ?", (entity_id,))
        return bool(result.changes)

    def _insert(self, values: Mapping[str, Any]) -> int:
        """Insert a row and return its new ID."""
        columns = list(values)
        placeholders = ", ".join("?" for _ in columns)
        result = self.executor.execute_query(
            f"INSERT INTO {self.table} ({', '.join(columns)}) VALUES ({placeholders})",
            [to_db(values[column]) for column in columns],
        )
        return result.insert_id

    def update(self, entity_id: int, patch: Patch) -> bool:
        """Apply a patch to one row.

        Only the columns the patch sets are written, plus ``updated_at``.

        Args:
            entity_id: Row ID
            patch: Fields to change

        Returns:
            True if the row exists
        """
        if not isinstance(patch, self.patch_type):
            raise TypeError(
                f"{type(self).__name__}.update expects {self.patch_type.__name__}, "
                f"got {type(patch).__name__}"
            )
        changes = self._prepare_changes(entity_id, patch.changes())
        if not changes:
            return self.exists(entity_id)
        return self._update_columns(entity_id, changes)

    def _prepare_changes(self, entity_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        """Hook for subclasses to add derived columns."""
        return changes

    def _update_columns(self, entity_id: int, changes: Mapping[str, Any]) -> bool:
        unknown = [column for column in changes if column not in self.updatable_columns]
        if unknown:
            raise ValueError(f"Columns not updatable on {self.table}: {', '.join(unknown)}")

        assignments = ", ".join(f"{column} = ?" for column in changes)
        params = [to_db(value) for value in changes.values()]
        params.append(entity_id)
        result = self.executor.execute_query(
            f"UPDATE {self.table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            params,
        )
        return bool(result.changes)
