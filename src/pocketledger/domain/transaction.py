"""Transaction domain service."""

import logging
from datetime import date as date_type
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from pocketledger.database.executor import QueryExecutor
from pocketledger.database.repositories import (
    BudgetRepository,
    CategoryRepository,
    TransactionRepository,
)
from pocketledger.domain.account import AccountService
from pocketledger.domain.entities import (
    BudgetSummary,
    CategorySummary,
    Transaction,
    TransactionType,
    TransactionWithCategory,
)
from pocketledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    budget_not_found,
    category_not_found,
    category_type_mismatch,
    transaction_not_found,
    validation_errors,
)
from pocketledger.domain.events import (
    DomainEvent,
    EventBus,
    TransactionCreatedEvent,
    TransactionDeletedEvent,
    TransactionUpdatedEvent,
)
from pocketledger.domain.patches import TransactionPatch, as_patch
from pocketledger.utils.periods import month_bounds
from pocketledger.utils.values import to_date, to_enum, to_money

logger = logging.getLogger(__name__)


def signed_amount(transaction: Transaction) -> Decimal:
    """Effect of a transaction on an account balance."""
    if transaction.type == TransactionType.INCOME:
        return transaction.amount
    return -transaction.amount


class TransactionService:
    """Service for managing transactions."""

    def __init__(
        self,
        executor: QueryExecutor,
        transactions: TransactionRepository,
        categories: CategoryRepository,
        budgets: BudgetRepository,
        accounts: AccountService,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize transaction service.

        Args:
            executor: Query executor, for grouping a write with its balance update
            transactions: Transaction repository
            categories: Category repository, for validation
            budgets: Budget repository, for validation
            accounts: Account service that keeps running balances
            event_bus: Bus that receives transaction events
        """
        self.executor = executor
        self.transactions = transactions
        self.categories = categories
        self.budgets = budgets
        self.accounts = accounts
        self.event_bus = event_bus

    def _publish(self, event: DomainEvent) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def get_transactions(self) -> list[Transaction]:
        return self.transactions.find_all()

    def get_transaction_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID.

        Returns:
            Transaction or None if not found
        """
        return self.transactions.find_by_id(transaction_id)

    def get_transactions_with_category(self) -> list[TransactionWithCategory]:
        """List transactions with category and budget names.

        Returns an empty list if the query fails.
        """
        try:
            return self.transactions.find_all_with_category()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load transactions with categories: {e}", exc_info=True)
            return []

    def get_transaction_with_category(self, transaction_id: int) -> Optional[TransactionWithCategory]:
        return self.transactions.find_with_category(transaction_id)

    def get_transactions_by_category_id(self, category_id: int) -> list[Transaction]:
        return self.transactions.find_by_category(category_id)

    def get_transactions_by_budget_id(self, budget_id: int) -> list[Transaction]:
        return self.transactions.find_by_budget(budget_id)

    def get_recent_transactions(self, limit: int = 10) -> list[Transaction]:
        if limit <= 0:
            raise ValidationError(f"Limit must be positive, got {limit}")
        return self.transactions.find_recent(limit)

    def get_transactions_by_month(self, year: int, month: int) -> list[Transaction]:
        """List transactions dated in one calendar month.

        Args:
            year: Year
            month: Month, 1-12

        Raises:
            ValidationError: If month is outside 1..12
        """
        with validation_errors():
            start, end = month_bounds(year, month)
        return self.transactions.find_by_date_range(start, end)

    def get_transactions_by_date_range(self, start_date: date_type, end_date: date_type) -> list[Transaction]:
        """List transactions within [start_date, end_date], inclusive.

        Raises:
            ValidationError: If start_date is after end_date
        """
        start_date, end_date = self._date_range(start_date, end_date)
        return self.transactions.find_by_date_range(start_date, end_date)

    def get_transactions_summary_by_category(
        self, start_date: date_type, end_date: date_type
    ) -> list[CategorySummary]:
        """Totals per category within a date range, largest first."""
        start_date, end_date = self._date_range(start_date, end_date)
        return self.transactions.summary_by_category(start_date, end_date)

    def get_transactions_summary_by_budget(
        self, start_date: date_type, end_date: date_type
    ) -> list[BudgetSummary]:
        """Expense totals per budget within a date range, largest first."""
        start_date, end_date = self._date_range(start_date, end_date)
        return self.transactions.summary_by_budget(start_date, end_date)

    def get_total_income(
        self, start_date: Optional[date_type] = None, end_date: Optional[date_type] = None
    ) -> Decimal:
        return self.transactions.total_by_type(TransactionType.INCOME, start_date, end_date)

    def get_total_expense(
        self, start_date: Optional[date_type] = None, end_date: Optional[date_type] = None
    ) -> Decimal:
        return self.transactions.total_by_type(TransactionType.EXPENSE, start_date, end_date)

    def create_transaction(
        self,
        amount: Union[Decimal, str, int],
        type: Union[TransactionType, str],
        category_id: int,
        date: Union[date_type, str],
        description: Optional[str] = None,
        budget_id: Optional[int] = None,
        account_id: Optional[int] = None,
    ) -> Transaction:
        """Create a transaction.

        The row and its account balance update are written in one transaction.

        Args:
            amount: Positive amount
            type: "income" or "expense"; must match the category's type
            category_id: Category ID
            date: Transaction date
            description: Optional description
            budget_id: Optional budget ID
            account_id: Optional account ID whose balance is adjusted

        Returns:
            The stored transaction

        Raises:
            ValidationError: If a value is invalid or a referenced row doesn't exist
        """
        with validation_errors():
            amount = to_money(amount)
            transaction_type = to_enum(TransactionType, type)
            day = to_date(date)
        self._validate(amount, transaction_type, category_id, budget_id, account_id)

        def write(executor: QueryExecutor) -> Transaction:
            created = self.transactions.create(
                amount=amount,
                type=transaction_type,
                category_id=category_id,
                date=day,
                description=description,
                budget_id=budget_id,
                account_id=account_id,
            )
            if created.account_id is not None:
                self.accounts.adjust_balance(created.account_id, signed_amount(created))
            return created

        transaction = self.executor.transaction(write)
        self._publish(TransactionCreatedEvent(transaction=transaction))
        return transaction

    def update_transaction(
        self, transaction_id: int, patch: Union[TransactionPatch, Mapping[str, Any]]
    ) -> Transaction:
        """Update a transaction.

        The merged record (stored values overlaid with the patch) is
        validated as a whole. Account balances are moved from the old
        amount and account to the new ones in the same transaction.

        Args:
            transaction_id: Transaction ID
            patch: TransactionPatch or mapping of fields to change

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the merged record is invalid
        """
        patch = as_patch(TransactionPatch, patch)
        existing = self.transactions.find_by_id(transaction_id)
        if existing is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if patch.is_empty():
            return existing

        merged = {**vars(existing), **patch.changes()}
        self._validate(
            merged["amount"],
            merged["type"],
            merged["category_id"],
            merged["budget_id"],
            merged["account_id"],
        )

        def write(executor: QueryExecutor) -> Transaction:
            self.transactions.update(transaction_id, patch)
            updated = self.transactions.find_by_id(transaction_id)
            if existing.account_id is not None:
                self.accounts.adjust_balance(existing.account_id, -signed_amount(existing))
            if updated.account_id is not None:
                self.accounts.adjust_balance(updated.account_id, signed_amount(updated))
            return updated

        transaction = self.executor.transaction(write)
        self._publish(TransactionUpdatedEvent(transaction=transaction, previous=existing))
        return transaction

    def delete_transaction(self, transaction_id: int) -> bool:
        """Delete a transaction and reverse its account balance effect.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        existing = self.transactions.find_by_id(transaction_id)
        if existing is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        def write(executor: QueryExecutor) -> bool:
            deleted = self.transactions.delete(transaction_id)
            if deleted and existing.account_id is not None:
                self.accounts.adjust_balance(existing.account_id, -signed_amount(existing))
            return deleted

        deleted = self.executor.transaction(write)
        if deleted:
            self._publish(TransactionDeletedEvent(transaction=existing))
        return deleted

    def _validate(
        self,
        amount: Decimal,
        transaction_type: TransactionType,
        category_id: Optional[int],
        budget_id: Optional[int],
        account_id: Optional[int],
    ) -> None:
        if amount <= 0:
            raise ValidationError(f"Amount must be greater than zero, got {amount}")

        if category_id is None:
            raise ValidationError("Category is required")
        category = self.categories.find_by_id(category_id)
        if category is None:
            raise ValidationError(category_not_found(category_id))
        if category.type != transaction_type:
            raise ValidationError(category_type_mismatch(category.type.value, transaction_type.value))

        if budget_id is not None and not self.budgets.exists(budget_id):
            raise ValidationError(budget_not_found(budget_id))
        if account_id is not None and self.accounts.get_account(account_id) is None:
            raise ValidationError(account_not_found(account_id))

    def _date_range(self, start_date: Any, end_date: Any) -> tuple[date_type, date_type]:
        with validation_errors():
            start_date = to_date(start_date)
            end_date = to_date(end_date)
        if start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")
        return start_date, end_date
