"""Bank balance domain service.

Each calendar month has at most one record. A month's record is created
lazily, seeded from the previous month's closing balance, so balances roll
over from December into the next January.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from pocketledger.database.executor import QueryExecutor
from pocketledger.database.repositories import BankBalanceRepository
from pocketledger.domain.entities import BankBalance
from pocketledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    bank_balance_not_found,
    validation_errors,
)
from pocketledger.domain.patches import BankBalancePatch, as_patch
from pocketledger.utils.periods import format_month, previous_month
from pocketledger.utils.values import to_money

logger = logging.getLogger(__name__)


class BankBalanceService:
    """Service for monthly opening and closing bank balances."""

    def __init__(self, executor: QueryExecutor, balances: BankBalanceRepository):
        """Initialize bank balance service.

        Args:
            executor: Query executor, for the read-then-insert of new months
            balances: Bank balance repository
        """
        self.executor = executor
        self.balances = balances

    def get_bank_balance(self, year: int, month: int) -> Optional[BankBalance]:
        """Get a month's balances without creating them.

        Returns:
            BankBalance or None if the month has no record
        """
        self._check_month(year, month)
        return self.balances.find_by_year_month(year, month)

    def get_bank_balances_by_year(self, year: int) -> list[BankBalance]:
        return self.balances.find_by_year(year)

    def get_all_bank_balances(self) -> list[BankBalance]:
        return self.balances.find_all()

    def get_or_create_bank_balance(self, year: int, month: int) -> BankBalance:
        """Get a month's balances, creating them from the prior month if absent."""
        self._check_month(year, month)
        return self.executor.transaction(lambda executor: self._get_or_create(year, month))

    def create_bank_balance(
        self,
        year: int,
        month: int,
        opening_balance: Union[Decimal, str, int],
        closing_balance: Optional[Union[Decimal, str, int]] = None,
    ) -> BankBalance:
        """Record a month's balances explicitly.

        Args:
            year: Year
            month: Month, 1-12
            opening_balance: Opening balance
            closing_balance: Closing balance; defaults to the opening balance

        Raises:
            ValidationError: If month is outside 1..12 or a value is invalid
            ConflictError: If the month already has a record
        """
        self._check_month(year, month)
        with validation_errors():
            opening = to_money(opening_balance)
            closing = to_money(closing_balance) if closing_balance is not None else opening

        def write(executor: QueryExecutor) -> BankBalance:
            if self.balances.find_by_year_month(year, month) is not None:
                raise ConflictError(f"Bank balance for {format_month(year, month)} already exists")
            return self.balances.create(
                year=year, month=month, opening_balance=opening, closing_balance=closing
            )

        return self.executor.transaction(write)

    def initialize_year(self, year: int, month: Optional[int] = None) -> BankBalance:
        """Make sure the target month of a year has a balance record.

        The target month is ``month`` when given, otherwise the current
        month for the current year and January for any other year. The
        current year does not start in January: the December closing of the
        previous year only carries into January when ``month=1`` is passed.
        An existing record is returned unchanged.

        Args:
            year: Year
            month: Optional month, 1-12

        Returns:
            The target month's record
        """
        if month is None:
            today = date.today()
            month = today.month if year == today.year else 1
        return self.get_or_create_bank_balance(year, month)

    def update_bank_balance(
        self,
        year: int,
        month: int,
        patch: Union[BankBalancePatch, Mapping[str, Any]],
    ) -> BankBalance:
        """Update a month's balances; fields left out keep their stored values.

        Returns:
            The record as stored after the update

        Raises:
            ValidationError: If month is outside 1..12 or a value is invalid
            NotFoundError: If the month has no record
        """
        self._check_month(year, month)
        patch = as_patch(BankBalancePatch, patch)
        found = self.balances.update_balances(
            year,
            month,
            opening_balance=patch.opening_balance,
            closing_balance=patch.closing_balance,
        )
        if not found:
            raise NotFoundError(bank_balance_not_found(year, month))
        return self.balances.find_by_year_month(year, month)

    def _get_or_create(self, year: int, month: int) -> BankBalance:
        existing = self.balances.find_by_year_month(year, month)
        if existing is not None:
            return existing

        opening = self._rollover_opening(year, month)
        logger.info(f"Creating bank balance for {format_month(year, month)} with opening {opening}")
        return self.balances.create(
            year=year, month=month, opening_balance=opening, closing_balance=opening
        )

    def _rollover_opening(self, year: int, month: int) -> Decimal:
        prior_year, prior_month = previous_month(year, month)
        prior = self.balances.find_by_year_month(prior_year, prior_month)
        if prior is None:
            return Decimal("0.00")
        return prior.closing_balance

    @staticmethod
    def _check_month(year: int, month: int) -> None:
        with validation_errors():
            format_month(year, month)
        if year < 1:
            raise ValidationError(f"Invalid year {year}")
