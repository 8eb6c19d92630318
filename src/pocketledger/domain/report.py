"""Report domain service: read-only aggregation over transactions."""

from collections import defaultdict
from datetime import date as date_type
from decimal import Decimal
from typing import Union

from pocketledger.database.repositories import (
    AccountRepository,
    CategoryRepository,
    TransactionRepository,
)
from pocketledger.domain.entities import (
    AccountReport,
    BudgetPeriod,
    Category,
    CategoryReport,
    MonthOverview,
    PeriodReport,
    Transaction,
    TransactionType,
    TrendReport,
)
from pocketledger.domain.errors import ValidationError, invalid_date_range, validation_errors
from pocketledger.utils.periods import bucket_key, month_bounds
from pocketledger.utils.values import to_date, to_enum

ZERO = Decimal("0.00")


class ReportService:
    """Service for period, trend and monthly reports."""

    def __init__(
        self,
        transactions: TransactionRepository,
        categories: CategoryRepository,
        accounts: AccountRepository,
    ):
        """Initialize report service.

        Args:
            transactions: Transaction repository
            categories: Category repository, for names
            accounts: Account repository, for per-account reports
        """
        self.transactions = transactions
        self.categories = categories
        self.accounts = accounts

    def generate_period_report(self, start_date: date_type, end_date: date_type) -> PeriodReport:
        """Build an income/expense report for [start_date, end_date].

        Category breakdowns are sorted by amount, largest first, with each
        category's share of its type's total as a percentage.

        Raises:
            ValidationError: If start_date is after end_date
        """
        start_date, end_date = self._date_range(start_date, end_date)
        transactions = self.transactions.find_by_date_range(start_date, end_date)
        categories = {category.id: category for category in self.categories.find_all()}

        income = [t for t in transactions if t.type == TransactionType.INCOME]
        expense = [t for t in transactions if t.type == TransactionType.EXPENSE]
        total_income = sum((t.amount for t in income), ZERO)
        total_expense = sum((t.amount for t in expense), ZERO)

        totals = self.transactions.totals_by_account(start_date, end_date)
        account_reports = []
        for account in self.accounts.find_all():
            account_totals = totals.get(account.id, {"income": ZERO, "expense": ZERO})
            account_reports.append(
                AccountReport(
                    account_id=account.id,
                    account_name=account.name,
                    balance=account.closing_balance,
                    total_income=account_totals["income"],
                    total_expense=account_totals["expense"],
                    net_change=account_totals["income"] - account_totals["expense"],
                )
            )

        return PeriodReport(
            start_date=start_date,
            end_date=end_date,
            total_income=total_income,
            total_expense=total_expense,
            net_change=total_income - total_expense,
            income_by_category=self._category_reports(income, categories, total_income),
            expense_by_category=self._category_reports(expense, categories, total_expense),
            account_reports=tuple(account_reports),
        )

    def _category_reports(
        self,
        transactions: list[Transaction],
        categories: dict[int, Category],
        total: Decimal,
    ) -> tuple[CategoryReport, ...]:
        amounts: dict[int, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[int, int] = defaultdict(int)
        for transaction in transactions:
            amounts[transaction.category_id] += transaction.amount
            counts[transaction.category_id] += 1

        reports = []
        for category_id, amount in amounts.items():
            category = categories.get(category_id)
            reports.append(
                CategoryReport(
                    category_id=category_id,
                    category_name=category.name if category else f"Category {category_id}",
                    total_amount=amount,
                    percentage=float(amount / total * 100) if total else 0.0,
                    transactions=counts[category_id],
                )
            )
        reports.sort(key=lambda report: (-report.total_amount, report.category_id))
        return tuple(reports)

    def generate_trend_report(
        self,
        start_date: date_type,
        end_date: date_type,
        interval: Union[BudgetPeriod, str] = BudgetPeriod.MONTHLY,
    ) -> TrendReport:
        """Bucket income and expense totals by day, ISO week, month or year.

        Only buckets that contain transactions appear, in ascending order.

        Raises:
            ValidationError: If the range or interval is invalid
        """
        start_date, end_date = self._date_range(start_date, end_date)
        with validation_errors():
            interval = to_enum(BudgetPeriod, interval)

        buckets: dict[str, dict[TransactionType, Decimal]] = {}
        for transaction in self.transactions.find_by_date_range(start_date, end_date):
            key = bucket_key(transaction.date, interval)
            bucket = buckets.setdefault(
                key, {TransactionType.INCOME: ZERO, TransactionType.EXPENSE: ZERO}
            )
            bucket[transaction.type] += transaction.amount

        dates = tuple(sorted(buckets))
        return TrendReport(
            interval=interval,
            dates=dates,
            income=tuple(buckets[key][TransactionType.INCOME] for key in dates),
            expense=tuple(buckets[key][TransactionType.EXPENSE] for key in dates),
        )

    def get_month_overview(self, year: int, month: int) -> MonthOverview:
        """Income, expense and their difference for one month."""
        with validation_errors():
            start, end = month_bounds(year, month)
        income = self.transactions.total_by_type(TransactionType.INCOME, start, end)
        expense = self.transactions.total_by_type(TransactionType.EXPENSE, start, end)
        return MonthOverview(
            year=year, month=month, income=income, expense=expense, balance=income - expense
        )

    @staticmethod
    def _date_range(start_date, end_date) -> tuple[date_type, date_type]:
        with validation_errors():
            start_date = to_date(start_date)
            end_date = to_date(end_date)
        if start_date > end_date:
            raise ValidationError(invalid_date_range(start_date, end_date))
        return start_date, end_date
