"""Category repository."""

from typing import Any, Mapping, Optional

from pocketledger.database.mappers import category_to_domain
from pocketledger.database.repositories.base import Repository
from pocketledger.domain.entities import Category, TransactionType
from pocketledger.domain.patches import CategoryPatch


class CategoryRepository(Repository[Category]):
    """Persistence for categories."""

    table = "categories"
    patch_type = CategoryPatch
    order_by = "sort_order, id"

    def _to_entity(self, row: Mapping[str, Any]) -> Category:
        return category_to_domain(row)

    def create(
        self,
        name: str,
        type: TransactionType,
        icon: str = "",
        color: str = "#9E9E9E",
        description: Optional[str] = None,
        sort_order: int = 0,
        is_default: bool = False,
        is_active: bool = True,
    ) -> Category:
        """Insert a category and return it as stored."""
        category_id = self._insert(
            {
                "name": name,
                "type": type,
                "icon": icon,
                "color": color,
                "description": description,
                "sort_order": sort_order,
                "is_default": is_default,
                "is_active": is_active,
            }
        )
        return self.find_by_id(category_id)

    def find_by_type(self, type: TransactionType) -> list[Category]:
        return self._query(
            f"SELECT * FROM categories WHERE type = ? ORDER BY {self.order_by}", (type,)
        )

    def find_active(self) -> list[Category]:
        return self._query(
            f"SELECT * FROM categories WHERE is_active = 1 ORDER BY {self.order_by}"
        )

    def find_by_name(self, name: str) -> Optional[Category]:
        return self._query_one("SELECT * FROM categories WHERE name = ? ORDER BY id", (name,))

    def existing_names(self) -> set[str]:
        result = self.executor.execute_query("SELECT name FROM categories")
        return {row["name"] for row in result.rows}
