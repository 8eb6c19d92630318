"""Account repository."""

from decimal import Decimal
from typing import Any, Mapping, Optional

from pocketledger.database.mappers import account_to_domain
from pocketledger.database.repositories.base import Repository
from pocketledger.domain.entities import Account, AccountType
from pocketledger.domain.patches import AccountPatch


class AccountRepository(Repository[Account]):
    """Persistence for accounts and their running balances."""

    table = "accounts"
    patch_type = AccountPatch
    order_by = "name"

    def _to_entity(self, row: Mapping[str, Any]) -> Account:
        return account_to_domain(row)

    def create(self, name: str, type: AccountType, opening_balance: Decimal) -> Account:
        """Insert an account; the closing balance starts at the opening balance."""
        account_id = self._insert(
            {
                "name": name,
                "type": type,
                "opening_balance": opening_balance,
                "closing_balance": opening_balance,
            }
        )
        return self.find_by_id(account_id)

    def find_by_name(self, name: str) -> Optional[Account]:
        return self._query_one("SELECT * FROM accounts WHERE name = ?", (name,))

    def set_closing_balance(self, account_id: int, closing_balance: Decimal) -> bool:
        return self._update_columns(account_id, {"closing_balance": closing_balance})
