"""Tests for transaction service."""

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.domain.entities import TransactionType
from pocketledger.domain.errors import NotFoundError, ValidationError
from pocketledger.domain.events import TRANSACTION_UPDATED
from pocketledger.domain.patches import TransactionPatch


def test_create_transaction(transaction_service, expense_category):
    """Test creating a transaction."""
    transaction = transaction_service.create_transaction(
        amount="42.50",
        type="expense",
        category_id=expense_category.id,
        date=date(2024, 3, 15),
        description="Weekly shop",
    )

    assert transaction.id is not None
    assert transaction.amount == Decimal("42.50")
    assert transaction.type == TransactionType.EXPENSE
    assert transaction.date == date(2024, 3, 15)
    assert transaction.description == "Weekly shop"
    assert transaction.budget_id is None
    assert transaction_service.get_transaction_by_id(transaction.id) == transaction


def test_create_transaction_validation(transaction_service, expense_category, income_category):
    """Test invalid transactions are rejected."""
    with pytest.raises(ValidationError, match="greater than zero"):
        transaction_service.create_transaction(0, "expense", expense_category.id, date(2024, 3, 1))

    with pytest.raises(ValidationError, match="greater than zero"):
        transaction_service.create_transaction("-5", "expense", expense_category.id, date(2024, 3, 1))

    with pytest.raises(ValidationError, match="Category 999 not found"):
        transaction_service.create_transaction(5, "expense", 999, date(2024, 3, 1))

    with pytest.raises(ValidationError, match="does not match"):
        transaction_service.create_transaction(5, "expense", income_category.id, date(2024, 3, 1))

    with pytest.raises(ValidationError, match="Budget 999 not found"):
        transaction_service.create_transaction(
            5, "expense", expense_category.id, date(2024, 3, 1), budget_id=999
        )

    with pytest.raises(ValidationError, match="Account 999 not found"):
        transaction_service.create_transaction(
            5, "expense", expense_category.id, date(2024, 3, 1), account_id=999
        )

    with pytest.raises(ValidationError):
        transaction_service.create_transaction("abc", "expense", expense_category.id, date(2024, 3, 1))

    with pytest.raises(ValidationError, match="out of range"):
        transaction_service.create_transaction("1e30", "expense", expense_category.id, date(2024, 3, 1))

    assert transaction_service.get_transactions() == []


def test_get_transactions_by_month(transaction_service, expense_category):
    """Test month filtering is inclusive of the first and last day only."""
    for day in (date(2024, 2, 28), date(2024, 3, 1), date(2024, 3, 31), date(2024, 4, 1)):
        transaction_service.create_transaction(10, "expense", expense_category.id, day)

    march = transaction_service.get_transactions_by_month(2024, 3)

    assert [t.date for t in march] == [date(2024, 3, 31), date(2024, 3, 1)]

    with pytest.raises(ValidationError):
        transaction_service.get_transactions_by_month(2024, 13)


def test_get_transactions_by_date_range(transaction_service, expense_category):
    transaction_service.create_transaction(10, "expense", expense_category.id, date(2024, 1, 10))
    transaction_service.create_transaction(20, "expense", expense_category.id, date(2024, 1, 20))

    result = transaction_service.get_transactions_by_date_range(date(2024, 1, 10), date(2024, 1, 15))
    assert [t.amount for t in result] == [Decimal("10.00")]

    with pytest.raises(ValidationError, match="after end date"):
        transaction_service.get_transactions_by_date_range(date(2024, 2, 1), date(2024, 1, 1))


def test_get_recent_transactions(transaction_service, expense_category):
    for day in range(1, 6):
        transaction_service.create_transaction(day, "expense", expense_category.id, date(2024, 3, day))

    recent = transaction_service.get_recent_transactions(limit=2)

    assert [t.date for t in recent] == [date(2024, 3, 5), date(2024, 3, 4)]
    with pytest.raises(ValidationError):
        transaction_service.get_recent_transactions(limit=0)


def test_transactions_with_category(transaction_service, expense_category, march_budget):
    created = transaction_service.create_transaction(
        10, "expense", expense_category.id, date(2024, 3, 2), budget_id=march_budget.id
    )

    rows = transaction_service.get_transactions_with_category()
    single = transaction_service.get_transaction_with_category(created.id)

    assert len(rows) == 1
    assert rows[0].category_name == "Groceries"
    assert rows[0].category_icon == "basket-outline"
    assert rows[0].budget_name == "March groceries"
    assert single == rows[0]


def test_transactions_with_category_degrades_on_query_failure(
    transaction_service, monkeypatch, caplog
):
    """Test a failing list query is logged and yields an empty list."""
    from sqlalchemy.exc import OperationalError

    def broken():
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(transaction_service.transactions, "find_all_with_category", broken)

    assert transaction_service.get_transactions_with_category() == []
    assert "Failed to load transactions" in caplog.text


def test_filters_by_category_and_budget(transaction_service, expense_category, march_budget):
    in_budget = transaction_service.create_transaction(
        10, "expense", expense_category.id, date(2024, 3, 2), budget_id=march_budget.id
    )
    transaction_service.create_transaction(5, "expense", expense_category.id, date(2024, 3, 3))

    assert len(transaction_service.get_transactions_by_category_id(expense_category.id)) == 2
    assert transaction_service.get_transactions_by_budget_id(march_budget.id) == [in_budget]


def test_summaries_and_totals(transaction_service, expense_category, income_category, march_budget):
    """Test category and budget summaries over a range."""
    transaction_service.create_transaction(100, "expense", expense_category.id, date(2024, 3, 1))
    transaction_service.create_transaction(
        50, "expense", expense_category.id, date(2024, 3, 2), budget_id=march_budget.id
    )
    transaction_service.create_transaction(500, "income", income_category.id, date(2024, 3, 3))
    transaction_service.create_transaction(999, "income", income_category.id, date(2024, 4, 1))

    start, end = date(2024, 3, 1), date(2024, 3, 31)
    by_category = transaction_service.get_transactions_summary_by_category(start, end)
    by_budget = transaction_service.get_transactions_summary_by_budget(start, end)

    assert [(s.category_name, s.type, s.total, s.count) for s in by_category] == [
        ("Freelance", TransactionType.INCOME, Decimal("500.00"), 1),
        ("Groceries", TransactionType.EXPENSE, Decimal("150.00"), 2),
    ]
    assert [(s.budget_id, s.total) for s in by_budget] == [
        (None, Decimal("100.00")),
        (march_budget.id, Decimal("50.00")),
    ]
    assert by_budget[1].budget_name == "March groceries"

    assert transaction_service.get_total_income(start, end) == Decimal("500.00")
    assert transaction_service.get_total_income() == Decimal("1499.00")
    assert transaction_service.get_total_expense(start, end) == Decimal("150.00")


def test_update_transaction(transaction_service, expense_category):
    """Test partial update keeps untouched fields."""
    transaction = transaction_service.create_transaction(
        10, "expense", expense_category.id, date(2024, 3, 1), description="Milk"
    )

    updated = transaction_service.update_transaction(
        transaction.id, {"amount": "12.00", "id": 999}
    )

    assert updated.id == transaction.id
    assert updated.amount == Decimal("12.00")
    assert updated.description == "Milk"
    assert updated.date == date(2024, 3, 1)
    assert transaction_service.get_transaction_by_id(999) is None


def test_update_transaction_validates_merged_record(
    transaction_service, expense_category, income_category
):
    """Test switching only the type against the stored category is rejected."""
    transaction = transaction_service.create_transaction(
        10, "expense", expense_category.id, date(2024, 3, 1)
    )

    with pytest.raises(ValidationError, match="does not match"):
        transaction_service.update_transaction(transaction.id, {"type": "income"})

    updated = transaction_service.update_transaction(
        transaction.id, TransactionPatch(type="income", category_id=income_category.id)
    )
    assert updated.type == TransactionType.INCOME

    with pytest.raises(NotFoundError):
        transaction_service.update_transaction(999, {"amount": 1})


def test_update_transaction_clears_budget(transaction_service, expense_category, march_budget):
    transaction = transaction_service.create_transaction(
        10, "expense", expense_category.id, date(2024, 3, 1), budget_id=march_budget.id
    )

    updated = transaction_service.update_transaction(transaction.id, TransactionPatch(clear_budget=True))

    assert updated.budget_id is None


def test_delete_transaction(transaction_service, expense_category):
    transaction = transaction_service.create_transaction(
        10, "expense", expense_category.id, date(2024, 3, 1)
    )

    assert transaction_service.delete_transaction(transaction.id) is True
    assert transaction_service.get_transaction_by_id(transaction.id) is None

    with pytest.raises(NotFoundError):
        transaction_service.delete_transaction(transaction.id)


def test_account_balance_follows_transactions(
    transaction_service, account_service, expense_category, income_category, sample_account
):
    """Test the account's closing balance tracks create, update and delete."""
    expense = transaction_service.create_transaction(
        Decimal("200.00"), "expense", expense_category.id, date(2024, 3, 1), account_id=sample_account.id
    )
    transaction_service.create_transaction(
        Decimal("50.00"), "income", income_category.id, date(2024, 3, 2), account_id=sample_account.id
    )
    assert account_service.get_account(sample_account.id).closing_balance == Decimal("850.00")

    transaction_service.update_transaction(expense.id, {"amount": "300.00"})
    assert account_service.get_account(sample_account.id).closing_balance == Decimal("750.00")

    transaction_service.update_transaction(expense.id, TransactionPatch(clear_account=True))
    assert account_service.get_account(sample_account.id).closing_balance == Decimal("1050.00")

    transaction_service.update_transaction(expense.id, {"account_id": sample_account.id})
    transaction_service.delete_transaction(expense.id)
    account = account_service.get_account(sample_account.id)
    assert account.closing_balance == Decimal("1050.00")
    assert account.opening_balance == Decimal("1000.00")


def test_transaction_events(app, transaction_service, expense_category):
    """Test writes publish their events with the affected rows."""
    received = []
    app.event_bus.subscribe(TRANSACTION_UPDATED, received.append)

    transaction = transaction_service.create_transaction(
        10, "expense", expense_category.id, date(2024, 3, 1)
    )
    transaction_service.update_transaction(transaction.id, {"amount": 15})
    transaction_service.delete_transaction(transaction.id)

    assert [event.event_type for event in received] == [
        "TransactionCreated",
        "TransactionUpdated",
        "TransactionDeleted",
    ]
    assert received[1].old_amount == Decimal("10.00")
    assert received[1].transaction.amount == Decimal("15.00")
    assert received[2].transaction.id == transaction.id
