"""Tests for category service."""

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.domain.defaults import DEFAULT_CATEGORIES
from pocketledger.domain.entities import TransactionType
from pocketledger.domain.errors import DependencyError, NotFoundError, ValidationError
from pocketledger.domain.events import CATEGORY_UPDATED


def test_default_categories_seeded(category_service):
    """Test a fresh database has the default categories."""
    categories = category_service.get_categories()

    assert len(categories) == len(DEFAULT_CATEGORIES)
    assert all(category.is_default for category in categories)
    expense = category_service.get_categories_by_type("expense")
    income = category_service.get_categories_by_type(TransactionType.INCOME)
    assert len(expense) == 8
    assert len(income) == 6
    assert expense[0].name == "Dining"


def test_create_category(category_service):
    """Test creating a category."""
    category = category_service.create_category(
        name="  Pets  ", type="expense", icon="paw-outline", color="#123456", description="Vet"
    )

    assert category.id is not None
    assert category.name == "Pets"
    assert category.type == TransactionType.EXPENSE
    assert category.icon == "paw-outline"
    assert category.description == "Vet"
    assert category.is_active
    assert not category.is_default
    assert category_service.get_category_by_id(category.id) == category


def test_create_category_validation(category_service):
    with pytest.raises(ValidationError, match="cannot be empty"):
        category_service.create_category(name="   ", type="expense")

    with pytest.raises(ValidationError, match="Invalid TransactionType"):
        category_service.create_category(name="Pets", type="transfer")


def test_get_categories_by_invalid_type(category_service):
    with pytest.raises(ValidationError):
        category_service.get_categories_by_type("savings")


def test_update_category_ignores_non_updatable_fields(category_service, expense_category):
    """Test a mapping cannot rewrite the ID."""
    updated = category_service.update_category(expense_category.id, {"id": 999, "name": "Food"})

    assert updated is True
    assert category_service.get_category_by_id(999) is None
    category = category_service.get_category_by_id(expense_category.id)
    assert category.name == "Food"
    assert category.icon == expense_category.icon


def test_update_category_strips_name(category_service, expense_category):
    category_service.update_category(expense_category.id, {"name": "  Food  "})

    assert category_service.get_category_by_id(expense_category.id).name == "Food"


def test_update_category_deactivate(category_service, expense_category):
    category_service.update_category(expense_category.id, {"is_active": False})

    active_ids = [category.id for category in category_service.get_active_categories()]
    assert expense_category.id not in active_ids


def test_update_category_errors(category_service, expense_category):
    with pytest.raises(NotFoundError, match="Category 999 not found"):
        category_service.update_category(999, {"name": "X"})

    with pytest.raises(ValidationError, match="cannot be empty"):
        category_service.update_category(expense_category.id, {"name": "  "})


def test_type_change_blocked_while_in_use(category_service, transaction_service, expense_category):
    """Test a category's type cannot flip under its transactions."""
    transaction_service.create_transaction(
        Decimal("10.00"), "expense", expense_category.id, date(2024, 3, 1)
    )

    with pytest.raises(DependencyError, match="Cannot change type"):
        category_service.update_category(expense_category.id, {"type": "income"})

    assert category_service.get_category_by_id(expense_category.id).type == TransactionType.EXPENSE


def test_type_change_allowed_when_unused(category_service, expense_category):
    category_service.update_category(expense_category.id, {"type": "income"})

    assert category_service.get_category_by_id(expense_category.id).type == TransactionType.INCOME


def test_delete_category(category_service, expense_category):
    assert category_service.delete_category(expense_category.id) is True
    assert category_service.get_category_by_id(expense_category.id) is None

    with pytest.raises(NotFoundError):
        category_service.delete_category(expense_category.id)


def test_delete_category_in_use(category_service, transaction_service, expense_category, march_budget):
    """Test deleting a referenced category is refused."""
    transaction_service.create_transaction(
        Decimal("10.00"), "expense", expense_category.id, date(2024, 3, 1)
    )

    with pytest.raises(DependencyError) as exc_info:
        category_service.delete_category(expense_category.id)

    message = str(exc_info.value)
    assert "1 transaction" in message
    assert "1 budget" in message
    assert category_service.get_category_by_id(expense_category.id) is not None


def test_category_events(app, category_service):
    """Test category writes publish on the category topic."""
    received = []
    app.event_bus.subscribe(CATEGORY_UPDATED, received.append)

    category = category_service.create_category(name="Pets", type="expense")
    category_service.update_category(category.id, {"color": "#000000"})
    category_service.delete_category(category.id)

    assert [event.event_type for event in received] == [
        "CategoryCreated",
        "CategoryUpdated",
        "CategoryDeleted",
    ]
    assert received[1].category.color == "#000000"
    assert received[2].category.id == category.id
