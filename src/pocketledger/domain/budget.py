"""Budget domain service.

Spent amounts are always summed fresh from the transactions table; the
stored ``is_budget_exceeded`` flag is a cache refreshed after every write
that can move it.
"""

import logging
from dataclasses import replace
from datetime import date as date_type
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from pocketledger.config import BUDGET_ALERT_THRESHOLD
from pocketledger.database.repositories import (
    BudgetRepository,
    CategoryRepository,
    TransactionRepository,
)
from pocketledger.domain.entities import Budget, BudgetPeriod, BudgetStatus, BudgetWithCategory
from pocketledger.domain.errors import (
    NotFoundError,
    ValidationError,
    budget_not_found,
    category_not_found,
    invalid_date_range,
    validation_errors,
)
from pocketledger.domain.events import (
    BudgetCreatedEvent,
    BudgetDeletedEvent,
    BudgetUpdatedEvent,
    DomainEvent,
    EventBus,
)
from pocketledger.domain.patches import BudgetPatch, as_patch
from pocketledger.utils.values import to_date, to_enum, to_money

logger = logging.getLogger(__name__)


class BudgetService:
    """Service for managing budgets and computing their consumption."""

    def __init__(
        self,
        budgets: BudgetRepository,
        categories: CategoryRepository,
        transactions: TransactionRepository,
        event_bus: Optional[EventBus] = None,
        alert_threshold: int = BUDGET_ALERT_THRESHOLD,
    ):
        """Initialize budget service.

        Args:
            budgets: Budget repository
            categories: Category repository, for validation
            transactions: Transaction repository, for spent amounts
            event_bus: Bus that receives budget events
            alert_threshold: Percentage of the budget at which it is alerted
        """
        self.budgets = budgets
        self.categories = categories
        self.transactions = transactions
        self.event_bus = event_bus
        self.alert_threshold = alert_threshold

    def _publish(self, event: DomainEvent) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def get_budgets(self) -> list[Budget]:
        return self.budgets.find_all()

    def get_budget_by_id(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID.

        Returns:
            Budget or None if not found
        """
        return self.budgets.find_by_id(budget_id)

    def get_budgets_by_month(self, year: int, month: int) -> list[Budget]:
        """List budgets whose month key is "YYYY-MM".

        Raises:
            ValidationError: If month is outside 1..12
        """
        with validation_errors():
            return self.budgets.find_by_month(year, month)

    def get_budgets_by_category(self, category_id: int) -> list[Budget]:
        return self.budgets.find_by_category(category_id)

    def get_budgets_by_period(self, period: Union[BudgetPeriod, str]) -> list[Budget]:
        with validation_errors():
            period = to_enum(BudgetPeriod, period)
        return self.budgets.find_by_period(period)

    def get_active_budgets(self, date: Optional[date_type] = None) -> list[Budget]:
        """List budgets whose range contains ``date`` (default today)."""
        day = to_date(date) if date is not None else date_type.today()
        return self.budgets.find_active(day)

    def get_budgets_by_date_range(self, start_date: date_type, end_date: date_type) -> list[Budget]:
        """List budgets overlapping [start_date, end_date]."""
        with validation_errors():
            start_date = to_date(start_date)
            end_date = to_date(end_date)
        if start_date > end_date:
            raise ValidationError(invalid_date_range(start_date, end_date))
        return self.budgets.find_overlapping(start_date, end_date)

    def get_budgets_with_category(self) -> list[BudgetWithCategory]:
        """List budgets with category display fields and spent amounts.

        Returns an empty list if the query fails.
        """
        try:
            return self.budgets.find_all_with_category()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load budgets with categories: {e}", exc_info=True)
            return []

    def get_budgets_by_month_with_category(self, year: int, month: int) -> list[BudgetWithCategory]:
        with validation_errors():
            return self.budgets.find_by_month_with_category(year, month)

    def get_budget_with_category(self, budget_id: int) -> Optional[BudgetWithCategory]:
        return self.budgets.find_with_category(budget_id)

    def get_total_budget_amount(self, date: Optional[date_type] = None) -> Decimal:
        """Sum of budget amounts, limited to budgets active on ``date`` if given."""
        return self.budgets.total_amount(to_date(date) if date is not None else None)

    def create_budget(
        self,
        name: str,
        category_id: int,
        amount: Union[Decimal, str, int],
        start_date: Union[date_type, str],
        end_date: Union[date_type, str],
        period: Union[BudgetPeriod, str] = BudgetPeriod.MONTHLY,
        description: Optional[str] = None,
    ) -> Budget:
        """Create a budget.

        Args:
            name: Budget name
            category_id: Category whose expenses count against the budget
            amount: Positive limit
            start_date: First day of the budget
            end_date: Last day of the budget; must be after start_date
            period: Budget period
            description: Optional description

        Returns:
            The stored budget, with its exceeded flag already computed

        Raises:
            ValidationError: If a value is invalid or the category doesn't exist
        """
        with validation_errors():
            values = {
                "name": (name or "").strip(),
                "category_id": category_id,
                "amount": to_money(amount),
                "start_date": to_date(start_date),
                "end_date": to_date(end_date),
                "period": to_enum(BudgetPeriod, period),
            }
        self._validate(values)

        budget = self.budgets.create(description=description, **values)
        self.refresh_budget_status(budget.id)
        budget = self.budgets.find_by_id(budget.id)
        self._publish(BudgetCreatedEvent(budget=budget))
        return budget

    def update_budget(self, budget_id: int, patch: Union[BudgetPatch, Mapping[str, Any]]) -> Budget:
        """Update a budget.

        The date range is validated on the merged record, so moving only the
        end date before the stored start date is rejected.

        Raises:
            NotFoundError: If the budget doesn't exist
            ValidationError: If the merged record is invalid
        """
        patch = as_patch(BudgetPatch, patch)
        existing = self.budgets.find_by_id(budget_id)
        if existing is None:
            raise NotFoundError(budget_not_found(budget_id))
        if patch.is_empty():
            return existing

        if patch.name is not None:
            patch = replace(patch, name=patch.name.strip())
        merged = {**vars(existing), **patch.changes()}
        self._validate(merged)

        self.budgets.update(budget_id, patch)
        self.refresh_budget_status(budget_id)
        budget = self.budgets.find_by_id(budget_id)
        self._publish(BudgetUpdatedEvent(budget=budget))
        return budget

    def delete_budget(self, budget_id: int) -> bool:
        """Delete a budget; its transactions are kept and unassigned.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        existing = self.budgets.find_by_id(budget_id)
        if existing is None:
            raise NotFoundError(budget_not_found(budget_id))
        deleted = self.budgets.delete(budget_id)
        if deleted:
            self._publish(BudgetDeletedEvent(budget=existing))
        return deleted

    def get_budget_status(self, budget_id: int) -> BudgetStatus:
        """Compute spent, remaining and percentage for a budget.

        Spent is the sum of expense transactions in the budget's category
        dated within its range.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        budget = self.budgets.find_by_id(budget_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id))
        return self._status(budget)

    def _status(self, budget: Budget) -> BudgetStatus:
        spent = self.transactions.sum_expenses(budget.category_id, budget.start_date, budget.end_date)
        return BudgetStatus(
            budget=budget,
            spent=spent,
            remaining=budget.amount - spent,
            percentage=float(spent / budget.amount * 100),
        )

    def refresh_budget_status(self, budget_id: int) -> BudgetStatus:
        """Recompute a budget's status and persist its exceeded flag.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        status = self.get_budget_status(budget_id)
        if status.is_exceeded != status.budget.is_budget_exceeded:
            self.budgets.set_exceeded(budget_id, status.is_exceeded)
        return status

    def get_budget_alerts(self, date: Optional[date_type] = None) -> list[BudgetStatus]:
        """List active budgets at or above the alert threshold, most consumed first.

        Returns an empty list if the query fails.
        """
        try:
            statuses = [self._status(budget) for budget in self.get_active_budgets(date)]
        except SQLAlchemyError as e:
            logger.error(f"Failed to compute budget alerts: {e}", exc_info=True)
            return []
        alerts = [status for status in statuses if status.percentage >= self.alert_threshold]
        alerts.sort(key=lambda status: status.percentage, reverse=True)
        return alerts

    def _validate(self, values: dict[str, Any]) -> None:
        if not values["name"]:
            raise ValidationError("Budget name cannot be empty")
        if values["amount"] <= 0:
            raise ValidationError(f"Budget amount must be greater than zero, got {values['amount']}")
        if values["start_date"] >= values["end_date"]:
            raise ValidationError(invalid_date_range(values["start_date"], values["end_date"]))
        if self.categories.find_by_id(values["category_id"]) is None:
            raise ValidationError(category_not_found(values["category_id"]))
