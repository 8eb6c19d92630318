"""Mapper functions to convert database rows into domain entities.

Rows arrive as plain dicts from the query executor. SQLite stores money as
NUMERIC and booleans as integers, so every value is normalized here and the
rest of the code only ever sees Decimal, bool, date and enum values.
"""

from typing import Any, Mapping

from pocketledger.domain import entities as domain
from pocketledger.utils.values import to_date, to_datetime, to_enum, to_money

Row = Mapping[str, Any]


def category_to_domain(row: Row) -> domain.Category:
    """Convert a categories row to a Category entity."""
    return domain.Category(
        id=row["id"],
        name=row["name"],
        type=to_enum(domain.TransactionType, row["type"]),
        icon=row["icon"],
        color=row["color"],
        description=row["description"],
        sort_order=row["sort_order"],
        is_default=bool(row["is_default"]),
        is_active=bool(row["is_active"]),
        created_at=to_datetime(row["created_at"]),
        updated_at=to_datetime(row["updated_at"]),
    )


def _transaction_fields(row: Row) -> dict[str, Any]:
    return dict(
        id=row["id"],
        amount=to_money(row["amount"]),
        type=to_enum(domain.TransactionType, row["type"]),
        category_id=row["category_id"],
        date=to_date(row["date"]),
        description=row["description"],
        budget_id=row["budget_id"],
        account_id=row["account_id"],
        created_at=to_datetime(row["created_at"]),
        updated_at=to_datetime(row["updated_at"]),
    )


def transaction_to_domain(row: Row) -> domain.Transaction:
    """Convert a transactions row to a Transaction entity."""
    return domain.Transaction(**_transaction_fields(row))


def transaction_with_category_to_domain(row: Row) -> domain.TransactionWithCategory:
    """Convert a transactions row joined with category and budget names."""
    return domain.TransactionWithCategory(
        **_transaction_fields(row),
        category_name=row.get("category_name"),
        category_icon=row.get("category_icon"),
        budget_name=row.get("budget_name"),
    )


def _budget_fields(row: Row) -> dict[str, Any]:
    return dict(
        id=row["id"],
        name=row["name"],
        category_id=row["category_id"],
        amount=to_money(row["amount"]),
        period=to_enum(domain.BudgetPeriod, row["period"]),
        start_date=to_date(row["start_date"]),
        end_date=to_date(row["end_date"]),
        month=row["month"],
        description=row["description"],
        is_budget_exceeded=bool(row["is_budget_exceeded"]),
        created_at=to_datetime(row["created_at"]),
        updated_at=to_datetime(row["updated_at"]),
    )


def budget_to_domain(row: Row) -> domain.Budget:
    """Convert a budgets row to a Budget entity."""
    return domain.Budget(**_budget_fields(row))


def budget_with_category_to_domain(row: Row) -> domain.BudgetWithCategory:
    """Convert a budgets row joined with its category and spent amount."""
    return domain.BudgetWithCategory(
        **_budget_fields(row),
        category_name=row.get("category_name"),
        category_icon=row.get("category_icon"),
        spent=to_money(row.get("spent")),
    )


def bank_balance_to_domain(row: Row) -> domain.BankBalance:
    """Convert a bank_balances row to a BankBalance entity."""
    return domain.BankBalance(
        id=row["id"],
        year=row["year"],
        month=row["month"],
        opening_balance=to_money(row["opening_balance"]),
        closing_balance=to_money(row["closing_balance"]),
        created_at=to_datetime(row["created_at"]),
        updated_at=to_datetime(row["updated_at"]),
    )


def account_to_domain(row: Row) -> domain.Account:
    """Convert an accounts row to an Account entity."""
    return domain.Account(
        id=row["id"],
        name=row["name"],
        type=to_enum(domain.AccountType, row["type"]),
        opening_balance=to_money(row["opening_balance"]),
        closing_balance=to_money(row["closing_balance"]),
        created_at=to_datetime(row["created_at"]),
        updated_at=to_datetime(row["updated_at"]),
    )


def category_summary_to_domain(row: Row) -> domain.CategorySummary:
    """Convert a grouped per-category total."""
    return domain.CategorySummary(
        category_id=row["category_id"],
        category_name=row["category_name"],
        category_icon=row["category_icon"],
        type=to_enum(domain.TransactionType, row["type"]),
        total=to_money(row["total"]),
        count=row["count"],
    )


def budget_summary_to_domain(row: Row) -> domain.BudgetSummary:
    """Convert a grouped per-budget total."""
    return domain.BudgetSummary(
        budget_id=row["budget_id"],
        budget_name=row["budget_name"],
        total=to_money(row["total"]),
        count=row["count"],
    )
