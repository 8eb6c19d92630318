"""Domain model entities for pocketledger.

These are pure data classes representing business concepts, independent of
the SQL schema. Repositories map rows into them; services and the CLI only
ever see these types.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of money flow. Categories carry the same type."""

    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """Budget period, also used as the bucket size of trend reports."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class AccountType(str, Enum):
    """Kind of account money is held in."""

    BANK = "bank"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    INVESTMENT = "investment"
    OTHER = "other"


@dataclass(frozen=True)
class Category:
    """Income or expense category."""

    id: int
    name: str
    type: TransactionType
    icon: str
    color: str
    description: Optional[str]
    sort_order: int
    is_default: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Transaction:
    """A single income or expense record."""

    id: int
    amount: Decimal
    type: TransactionType
    category_id: int
    date: date
    description: Optional[str]
    budget_id: Optional[int]
    account_id: Optional[int]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TransactionWithCategory(Transaction):
    """Transaction joined with its category (and budget) display fields."""

    category_name: Optional[str] = None
    category_icon: Optional[str] = None
    budget_name: Optional[str] = None


@dataclass(frozen=True)
class Budget:
    """Spending limit for one category over a date range.

    ``month`` is the "YYYY-MM" of ``start_date``; ``is_budget_exceeded`` is
    the last recomputed spent > amount comparison.
    """

    id: int
    name: str
    category_id: int
    amount: Decimal
    period: BudgetPeriod
    start_date: date
    end_date: date
    month: str
    description: Optional[str]
    is_budget_exceeded: bool
    created_at: datetime
    updated_at: datetime

    def contains(self, day: date) -> bool:
        """Return True if ``day`` falls inside the budget's date range."""
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class BudgetWithCategory(Budget):
    """Budget joined with category display fields and the amount spent so far."""

    category_name: Optional[str] = None
    category_icon: Optional[str] = None
    spent: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class BankBalance:
    """Opening and closing bank balance for one calendar month."""

    id: int
    year: int
    month: int
    opening_balance: Decimal
    closing_balance: Decimal
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Account:
    """Account with a running closing balance."""

    id: int
    name: str
    type: AccountType
    opening_balance: Decimal
    closing_balance: Decimal
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class BudgetStatus:
    """Freshly computed consumption of a budget."""

    budget: Budget
    spent: Decimal
    remaining: Decimal
    percentage: float

    @property
    def is_exceeded(self) -> bool:
        return self.spent > self.budget.amount


@dataclass(frozen=True)
class CategorySummary:
    """Transaction total for one category in a date range."""

    category_id: int
    category_name: Optional[str]
    category_icon: Optional[str]
    type: TransactionType
    total: Decimal
    count: int


@dataclass(frozen=True)
class BudgetSummary:
    """Transaction total for one budget (None = not assigned to a budget)."""

    budget_id: Optional[int]
    budget_name: Optional[str]
    total: Decimal
    count: int


@dataclass(frozen=True)
class CategoryReport:
    """Per-category share of a period total."""

    category_id: int
    category_name: str
    total_amount: Decimal
    percentage: float
    transactions: int


@dataclass(frozen=True)
class AccountReport:
    """Per-account activity in a period."""

    account_id: int
    account_name: str
    balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    net_change: Decimal


@dataclass(frozen=True)
class PeriodReport:
    """Income/expense report for a date range."""

    start_date: date
    end_date: date
    total_income: Decimal
    total_expense: Decimal
    net_change: Decimal
    income_by_category: tuple[CategoryReport, ...]
    expense_by_category: tuple[CategoryReport, ...]
    account_reports: tuple[AccountReport, ...]


@dataclass(frozen=True)
class TrendReport:
    """Income and expense series bucketed by day, week, month or year."""

    interval: BudgetPeriod
    dates: tuple[str, ...]
    income: tuple[Decimal, ...]
    expense: tuple[Decimal, ...]


@dataclass(frozen=True)
class MonthOverview:
    """Income, expense and net balance of one month."""

    year: int
    month: int
    income: Decimal
    expense: Decimal
    balance: Decimal


@dataclass(frozen=True)
class InitializationResult:
    """Outcome of a database initialization pass."""

    created_tables: tuple[str, ...]
    seeded_categories: int
    cleared_tables: tuple[str, ...] = ()
