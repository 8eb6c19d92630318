"""Transaction repository: CRUD, joined reads and grouped aggregates."""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from pocketledger.database.mappers import (
    budget_summary_to_domain,
    category_summary_to_domain,
    transaction_to_domain,
    transaction_with_category_to_domain,
)
from pocketledger.database.repositories.base import Repository
from pocketledger.domain.entities import (
    BudgetSummary,
    CategorySummary,
    Transaction,
    TransactionType,
    TransactionWithCategory,
)
from pocketledger.domain.patches import TransactionPatch
from pocketledger.utils.values import to_db, to_money

_WITH_CATEGORY = """
    SELECT t.*, c.name AS category_name, c.icon AS category_icon, b.name AS budget_name
    FROM transactions t
    LEFT JOIN categories c ON c.id = t.category_id
    LEFT JOIN budgets b ON b.id = t.budget_id
"""


class TransactionRepository(Repository[Transaction]):
    """Persistence for transactions."""

    table = "transactions"
    patch_type = TransactionPatch
    order_by = "date DESC, id DESC"

    def _to_entity(self, row: Mapping[str, Any]) -> Transaction:
        return transaction_to_domain(row)

    def create(
        self,
        amount: Decimal,
        type: TransactionType,
        category_id: int,
        date: date,
        description: Optional[str] = None,
        budget_id: Optional[int] = None,
        account_id: Optional[int] = None,
    ) -> Transaction:
        """Insert a transaction and return it as stored."""
        transaction_id = self._insert(
            {
                "amount": amount,
                "type": type,
                "category_id": category_id,
                "budget_id": budget_id,
                "account_id": account_id,
                "description": description,
                "date": date,
            }
        )
        return self.find_by_id(transaction_id)

    def find_by_date_range(self, start_date: date, end_date: date) -> list[Transaction]:
        """Transactions dated within [start_date, end_date], inclusive."""
        return self._query(
            f"SELECT * FROM transactions WHERE date >= ? AND date <= ? ORDER BY {self.order_by}",
            (start_date, end_date),
        )

    def find_by_category(self, category_id: int) -> list[Transaction]:
        return self._query(
            f"SELECT * FROM transactions WHERE category_id = ? ORDER BY {self.order_by}",
            (category_id,),
        )

    def find_by_budget(self, budget_id: int) -> list[Transaction]:
        return self._query(
            f"SELECT * FROM transactions WHERE budget_id = ? ORDER BY {self.order_by}",
            (budget_id,),
        )

    def find_recent(self, limit: int) -> list[Transaction]:
        return self._query(
            f"SELECT * FROM transactions ORDER BY {self.order_by} LIMIT ?", (limit,)
        )

    def find_all_with_category(self) -> list[TransactionWithCategory]:
        result = self.executor.execute_query(f"{_WITH_CATEGORY} ORDER BY t.date DESC, t.id DESC")
        return [transaction_with_category_to_domain(row) for row in result.rows]

    def find_with_category(self, transaction_id: int) -> Optional[TransactionWithCategory]:
        result = self.executor.execute_query(f"{_WITH_CATEGORY} WHERE t.id = ?", (transaction_id,))
        row = result.first()
        return transaction_with_category_to_domain(row) if row else None

    def count_by_category(self, category_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM transactions WHERE category_id = ?", (category_id,), default=0
        )

    def count_by_account(self, account_id: int) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM transactions WHERE account_id = ?", (account_id,), default=0
        )

    def total_by_type(
        self,
        type: TransactionType,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Decimal:
        """Sum of amounts of one type, optionally within a date range."""
        sql = "SELECT SUM(amount) FROM transactions WHERE type = ?"
        params: list[Any] = [type]
        if start_date is not None:
            sql += " AND date >= ?"
            params.append(start_date)
        if end_date is not None:
            sql += " AND date <= ?"
            params.append(end_date)
        return to_money(self._scalar(sql, params, default=0))

    def sum_expenses(self, category_id: int, start_date: date, end_date: date) -> Decimal:
        """Expense total of one category within [start_date, end_date]."""
        return to_money(
            self._scalar(
                "SELECT SUM(amount) FROM transactions "
                "WHERE type = 'expense' AND category_id = ? AND date >= ? AND date <= ?",
                (category_id, start_date, end_date),
                default=0,
            )
        )

    def summary_by_category(self, start_date: date, end_date: date) -> list[CategorySummary]:
        """Totals per category and type, largest first."""
        result = self.executor.execute_query(
            """
            SELECT t.category_id AS category_id, c.name AS category_name,
                   c.icon AS category_icon, t.type AS type,
                   SUM(t.amount) AS total, COUNT(*) AS count
            FROM transactions t
            LEFT JOIN categories c ON c.id = t.category_id
            WHERE t.date >= ? AND t.date <= ?
            GROUP BY t.category_id, t.type
            ORDER BY total DESC
            """,
            (to_db(start_date), to_db(end_date)),
        )
        return [category_summary_to_domain(row) for row in result.rows]

    def summary_by_budget(self, start_date: date, end_date: date) -> list[BudgetSummary]:
        """Expense totals per budget; unassigned expenses group under None."""
        result = self.executor.execute_query(
            """
            SELECT t.budget_id AS budget_id, b.name AS budget_name,
                   SUM(t.amount) AS total, COUNT(*) AS count
            FROM transactions t
            LEFT JOIN budgets b ON b.id = t.budget_id
            WHERE t.type = 'expense' AND t.date >= ? AND t.date <= ?
            GROUP BY t.budget_id
            ORDER BY total DESC
            """,
            (to_db(start_date), to_db(end_date)),
        )
        return [budget_summary_to_domain(row) for row in result.rows]

    def totals_by_account(self, start_date: date, end_date: date) -> dict[int, dict[str, Decimal]]:
        """Income and expense per account within a date range.

        Returns:
            {account_id: {"income": Decimal, "expense": Decimal}}
        """
        result = self.executor.execute_query(
            """
            SELECT account_id, type, SUM(amount) AS total
            FROM transactions
            WHERE account_id IS NOT NULL AND date >= ? AND date <= ?
            GROUP BY account_id, type
            """,
            (to_db(start_date), to_db(end_date)),
        )
        totals: dict[int, dict[str, Decimal]] = {}
        for row in result.rows:
            bucket = totals.setdefault(
                row["account_id"], {"income": Decimal("0.00"), "expense": Decimal("0.00")}
            )
            bucket[row["type"]] = to_money(row["total"])
        return totals
