"""Account domain service."""

from dataclasses import replace
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from pocketledger.database.repositories import AccountRepository, TransactionRepository
from pocketledger.domain.entities import Account, AccountType
from pocketledger.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    validation_errors,
)
from pocketledger.domain.patches import AccountPatch, as_patch
from pocketledger.utils.values import to_enum, to_money


class AccountService:
    """Service for managing accounts and their running balances."""

    def __init__(self, accounts: AccountRepository, transactions: TransactionRepository):
        """Initialize account service.

        Args:
            accounts: Account repository
            transactions: Transaction repository, for reference checks
        """
        self.accounts = accounts
        self.transactions = transactions

    def create_account(
        self,
        name: str,
        type: Union[AccountType, str] = AccountType.BANK,
        opening_balance: Union[Decimal, str, int] = Decimal("0.00"),
    ) -> Account:
        """Create a new account.

        Args:
            name: Account name
            type: Account type
            opening_balance: Starting balance; the closing balance starts here too

        Returns:
            The stored account

        Raises:
            ValidationError: If the name is empty or a value is invalid
            ConflictError: If account name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name cannot be empty")
        with validation_errors():
            account_type = to_enum(AccountType, type)
            opening_balance = to_money(opening_balance)

        if self.accounts.find_by_name(name) is not None:
            raise ConflictError(f"Account with name '{name}' already exists")

        return self.accounts.create(name=name, type=account_type, opening_balance=opening_balance)

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID.

        Returns:
            Account or None if not found
        """
        return self.accounts.find_by_id(account_id)

    def get_account_by_name(self, name: str) -> Optional[Account]:
        return self.accounts.find_by_name(name)

    def list_accounts(self) -> list[Account]:
        return self.accounts.find_all()

    def _require(self, account_id: int) -> Account:
        account = self.accounts.find_by_id(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def update_account(self, account_id: int, patch: Union[AccountPatch, Mapping[str, Any]]) -> Account:
        """Update an account.

        Changing the opening balance without an explicit closing balance
        shifts the closing balance by the same difference, so recorded
        activity is preserved.

        Raises:
            NotFoundError: If the account doesn't exist
            ConflictError: If the new name is taken
            ValidationError: If a value is invalid
        """
        patch = as_patch(AccountPatch, patch)
        account = self._require(account_id)

        if patch.name is not None:
            name = patch.name.strip()
            if not name:
                raise ValidationError("Account name cannot be empty")
            other = self.accounts.find_by_name(name)
            if other is not None and other.id != account_id:
                raise ConflictError(f"Account with name '{name}' already exists")
            patch = replace(patch, name=name)

        if patch.opening_balance is not None and patch.closing_balance is None:
            shift = patch.opening_balance - account.opening_balance
            patch = replace(patch, closing_balance=account.closing_balance + shift)

        self.accounts.update(account_id, patch)
        return self.accounts.find_by_id(account_id)

    def delete_account(self, account_id: int) -> bool:
        """Delete an account without transactions.

        Raises:
            NotFoundError: If the account doesn't exist
            DependencyError: If transactions reference it
        """
        self._require(account_id)
        transaction_count = self.transactions.count_by_account(account_id)
        if transaction_count:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))
        return self.accounts.delete(account_id)

    def adjust_balance(self, account_id: int, delta: Decimal) -> Account:
        """Add a signed amount to the account's closing balance.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        account = self._require(account_id)
        self.accounts.set_closing_balance(account_id, account.closing_balance + to_money(delta))
        return self.accounts.find_by_id(account_id)

    def reset_opening_balance(self, account_id: int) -> Account:
        """Start a new period: the opening balance becomes the closing balance.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        account = self._require(account_id)
        self.accounts.update(account_id, AccountPatch(opening_balance=account.closing_balance))
        return self.accounts.find_by_id(account_id)
