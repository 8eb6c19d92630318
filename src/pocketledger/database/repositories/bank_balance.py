"""Bank balance repository."""

from decimal import Decimal
from typing import Any, Mapping, Optional

from pocketledger.database.mappers import bank_balance_to_domain
from pocketledger.database.repositories.base import Repository
from pocketledger.domain.entities import BankBalance
from pocketledger.domain.patches import BankBalancePatch
from pocketledger.utils.values import to_db


class BankBalanceRepository(Repository[BankBalance]):
    """Persistence for monthly bank balances, keyed by (year, month)."""

    table = "bank_balances"
    patch_type = BankBalancePatch
    order_by = "year, month"

    def _to_entity(self, row: Mapping[str, Any]) -> BankBalance:
        return bank_balance_to_domain(row)

    def create(
        self, year: int, month: int, opening_balance: Decimal, closing_balance: Decimal
    ) -> BankBalance:
        """Insert a month's balances.

        Raises:
            sqlalchemy.exc.IntegrityError: If the month already has a record
        """
        balance_id = self._insert(
            {
                "year": year,
                "month": month,
                "opening_balance": opening_balance,
                "closing_balance": closing_balance,
            }
        )
        return self.find_by_id(balance_id)

    def find_by_year_month(self, year: int, month: int) -> Optional[BankBalance]:
        return self._query_one(
            "SELECT * FROM bank_balances WHERE year = ? AND month = ?", (year, month)
        )

    def find_by_year(self, year: int) -> list[BankBalance]:
        return self._query("SELECT * FROM bank_balances WHERE year = ? ORDER BY month", (year,))

    def update_balances(
        self,
        year: int,
        month: int,
        opening_balance: Optional[Decimal] = None,
        closing_balance: Optional[Decimal] = None,
    ) -> bool:
        """Update a month's balances in one statement.

        A None argument keeps the stored value.

        Returns:
            True if the month has a record
        """
        result = self.executor.execute_query(
            """
            UPDATE bank_balances
            SET opening_balance = COALESCE(?, opening_balance),
                closing_balance = COALESCE(?, closing_balance),
                updated_at = CURRENT_TIMESTAMP
            WHERE year = ? AND month = ?
            """,
            (to_db(opening_balance), to_db(closing_balance), year, month),
        )
        return bool(result.changes)
