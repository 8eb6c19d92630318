"""Tests for partial-update patches."""

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.domain.entities import TransactionType
from pocketledger.domain.errors import ValidationError
from pocketledger.domain.patches import (
    BudgetPatch,
    CategoryPatch,
    TransactionPatch,
    as_patch,
)


def test_from_mapping_ignores_identity_columns():
    """Test id and timestamps never make it into a patch."""
    patch = CategoryPatch.from_mapping(
        {"id": 999, "name": "Food", "created_at": "2020-01-01", "updated_at": "2020-01-01"}
    )

    assert patch.changes() == {"name": "Food"}
    assert "id" not in CategoryPatch.updatable_fields()


def test_values_are_coerced():
    patch = TransactionPatch.from_mapping(
        {"amount": "12.345", "type": "Expense", "date": "2024-03-15"}
    )

    assert patch.amount == Decimal("12.35")
    assert patch.type == TransactionType.EXPENSE
    assert patch.date == date(2024, 3, 15)


def test_empty_patch():
    assert TransactionPatch().is_empty()
    assert BudgetPatch.from_mapping({"unknown": 1}).is_empty()


def test_clear_flags_null_references():
    """Test clear flags write NULL for nullable references."""
    patch = TransactionPatch(clear_budget=True, clear_account=True)

    assert patch.changes() == {"budget_id": None, "account_id": None}
    assert not patch.is_empty()


def test_clear_flag_with_value_is_rejected():
    with pytest.raises(ValueError, match="budget_id and clear_budget"):
        TransactionPatch(budget_id=1, clear_budget=True)


def test_clear_flags_are_not_columns():
    assert "clear_budget" not in TransactionPatch.updatable_fields()
    assert "clear_account" not in TransactionPatch.updatable_fields()


def test_as_patch_passes_patches_through():
    patch = BudgetPatch(name="Rent")
    assert as_patch(BudgetPatch, patch) is patch
    assert as_patch(BudgetPatch, None) == BudgetPatch()


def test_as_patch_reports_bad_values_as_validation_errors():
    """Test coercion failures surface as ValidationError."""
    with pytest.raises(ValidationError, match="Could not parse amount"):
        as_patch(TransactionPatch, {"amount": "lots"})

    with pytest.raises(ValidationError, match="Invalid TransactionType"):
        as_patch(CategoryPatch, {"type": "transfer"})
