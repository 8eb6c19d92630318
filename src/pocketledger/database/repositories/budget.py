"""Budget repository."""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from pocketledger.database.mappers import budget_to_domain, budget_with_category_to_domain
from pocketledger.database.repositories.base import Repository
from pocketledger.domain.entities import Budget, BudgetPeriod, BudgetWithCategory
from pocketledger.domain.patches import BudgetPatch
from pocketledger.utils.periods import format_month, month_key
from pocketledger.utils.values import to_date, to_db, to_money

# Spent is summed from the transactions table on every read, never cached
_WITH_CATEGORY = """
    SELECT b.*, c.name AS category_name, c.icon AS category_icon,
           COALESCE((
               SELECT SUM(t.amount) FROM transactions t
               WHERE t.category_id = b.category_id
                 AND t.type = 'expense'
                 AND t.date >= b.start_date AND t.date <= b.end_date
           ), 0) AS spent
    FROM budgets b
    LEFT JOIN categories c ON c.id = b.category_id
"""


class BudgetRepository(Repository[Budget]):
    """Persistence for budgets.

    ``month`` is always derived from ``start_date`` here, so callers can
    never write a month that disagrees with the range.
    """

    table = "budgets"
    patch_type = BudgetPatch
    derived_columns = ("month", "is_budget_exceeded")
    order_by = "start_date DESC, id DESC"

    def _to_entity(self, row: Mapping[str, Any]) -> Budget:
        return budget_to_domain(row)

    def create(
        self,
        name: str,
        category_id: int,
        amount: Decimal,
        period: BudgetPeriod,
        start_date: date,
        end_date: date,
        description: Optional[str] = None,
    ) -> Budget:
        """Insert a budget and return it as stored."""
        budget_id = self._insert(
            {
                "name": name,
                "category_id": category_id,
                "amount": amount,
                "period": period,
                "start_date": start_date,
                "end_date": end_date,
                "month": month_key(start_date),
                "description": description,
                "is_budget_exceeded": False,
            }
        )
        return self.find_by_id(budget_id)

    def _prepare_changes(self, entity_id: int, changes: dict[str, Any]) -> dict[str, Any]:
        if "start_date" in changes:
            changes["month"] = month_key(to_date(changes["start_date"]))
        return changes

    def find_by_month(self, year: int, month: int) -> list[Budget]:
        """Budgets whose month key starts with "YYYY-MM"."""
        return self._query(
            f"SELECT * FROM budgets WHERE month LIKE ? ORDER BY {self.order_by}",
            (f"{format_month(year, month)}%",),
        )

    def find_by_category(self, category_id: int) -> list[Budget]:
        return self._query(
            f"SELECT * FROM budgets WHERE category_id = ? ORDER BY {self.order_by}",
            (category_id,),
        )

    def find_by_period(self, period: BudgetPeriod) -> list[Budget]:
        return self._query(
            f"SELECT * FROM budgets WHERE period = ? ORDER BY {self.order_by}", (period,)
        )

    def find_active(self, day: date) -> list[Budget]:
        """Budgets whose range contains ``day``."""
        return self._query(
            f"SELECT * FROM budgets WHERE start_date <= ? AND end_date >= ? ORDER BY {self.order_by}",
            (day, day),
        )

    def find_overlapping(self, start_date: date, end_date: date) -> list[Budget]:
        """Budgets whose range intersects [start_date, end_date]."""
        return self._query(
            f"SELECT * FROM budgets WHERE start_date <= ? AND end_date >= ? ORDER BY {self.order_by}",
            (end_date, start_date),
        )

    def find_covering(self, category_id: int, day: date) -> list[Budget]:
        """Budgets of a category whose range contains ``day``."""
        return self._query(
            "SELECT * FROM budgets WHERE category_id = ? AND start_date <= ? AND end_date >= ? "
            f"ORDER BY {self.order_by}",
            (category_id, day, day),
        )

    def find_all_with_category(self) -> list[BudgetWithCategory]:
        result = self.executor.execute_query(
            f"{_WITH_CATEGORY} ORDER BY b.start_date DESC, b.id DESC"
        )
        return [budget_with_category_to_domain(row) for row in result.rows]

    def find_by_month_with_category(self, year: int, month: int) -> list[BudgetWithCategory]:
        result = self.executor.execute_query(
            f"{_WITH_CATEGORY} WHERE b.month LIKE ? ORDER BY b.start_date DESC, b.id DESC",
            (f"{format_month(year, month)}%",),
        )
        return [budget_with_category_to_domain(row) for row in result.rows]

    def find_with_category(self, budget_id: int) -> Optional[BudgetWithCategory]:
        result = self.executor.execute_query(f"{_WITH_CATEGORY} WHERE b.id = ?", (budget_id,))
        row = result.first()
        return budget_with_category_to_domain(row) if row else None

    def count_by_category(self, category_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM budgets WHERE category_id = ?", (category_id,), default=0
        )

    def total_amount(self, day: Optional[date] = None) -> Decimal:
        """Sum of budget amounts, limited to budgets active on ``day`` if given."""
        if day is None:
            return to_money(self._scalar("SELECT SUM(amount) FROM budgets", default=0))
        return to_money(
            self._scalar(
                "SELECT SUM(amount) FROM budgets WHERE start_date <= ? AND end_date >= ?",
                (to_db(day), to_db(day)),
                default=0,
            )
        )

    def set_exceeded(self, budget_id: int, exceeded: bool) -> bool:
        """Persist the recomputed exceeded flag."""
        return self._update_columns(budget_id, {"is_budget_exceeded": exceeded})
