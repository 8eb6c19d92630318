"""Tests for bank balance service."""

from datetime import date
from decimal import Decimal

import pytest

from pocketledger.domain.errors import ConflictError, NotFoundError, ValidationError
from pocketledger.domain.patches import BankBalancePatch


def test_get_or_create_starts_at_zero(bank_balance_service):
    balance = bank_balance_service.get_or_create_bank_balance(2024, 5)

    assert (balance.year, balance.month) == (2024, 5)
    assert balance.opening_balance == Decimal("0.00")
    assert balance.closing_balance == Decimal("0.00")


def test_get_bank_balance_does_not_create(bank_balance_service):
    assert bank_balance_service.get_bank_balance(2024, 5) is None
    assert bank_balance_service.get_all_bank_balances() == []


def test_rollover_from_previous_month(bank_balance_service):
    """Test December's closing balance opens the next January."""
    bank_balance_service.create_bank_balance(2023, 12, Decimal("300.00"), Decimal("500.00"))

    january = bank_balance_service.initialize_year(2024, 1)

    assert january.opening_balance == Decimal("500.00")
    assert january.closing_balance == Decimal("500.00")


def test_current_year_rolls_over_only_from_january(bank_balance_service):
    """Test the default month of the current year is this month, not January."""
    year = date.today().year
    bank_balance_service.create_bank_balance(year - 1, 12, Decimal("300.00"), Decimal("500.00"))

    january = bank_balance_service.initialize_year(year, 1)

    assert january.opening_balance == Decimal("500.00")
    assert bank_balance_service.initialize_year(year).month == date.today().month


def test_initialize_year_is_idempotent(bank_balance_service):
    first = bank_balance_service.initialize_year(2024, 3)
    bank_balance_service.update_bank_balance(2024, 3, {"closing_balance": "75"})

    second = bank_balance_service.initialize_year(2024, 3)

    assert second.id == first.id
    assert second.closing_balance == Decimal("75.00")
    assert len(bank_balance_service.get_bank_balances_by_year(2024)) == 1


def test_initialize_year_default_month(bank_balance_service):
    """Test past years start in January and the current year in this month."""
    assert bank_balance_service.initialize_year(2001).month == 1

    today = date.today()
    assert bank_balance_service.initialize_year(today.year).month == today.month


def test_partial_update_keeps_other_balance(bank_balance_service):
    """Test a field left out of the update keeps its stored value."""
    bank_balance_service.create_bank_balance(2024, 6, 100, 250)

    updated = bank_balance_service.update_bank_balance(2024, 6, BankBalancePatch(opening_balance="120"))

    assert updated.opening_balance == Decimal("120.00")
    assert updated.closing_balance == Decimal("250.00")


def test_update_missing_month(bank_balance_service):
    with pytest.raises(NotFoundError, match="2024-07"):
        bank_balance_service.update_bank_balance(2024, 7, {"opening_balance": 1})


def test_create_bank_balance_conflict(bank_balance_service):
    created = bank_balance_service.create_bank_balance(2024, 8, "10")
    assert created.closing_balance == Decimal("10.00")

    with pytest.raises(ConflictError, match="already exists"):
        bank_balance_service.create_bank_balance(2024, 8, "20")


def test_invalid_month(bank_balance_service):
    with pytest.raises(ValidationError):
        bank_balance_service.get_or_create_bank_balance(2024, 13)
    with pytest.raises(ValidationError):
        bank_balance_service.get_bank_balance(2024, 0)
    with pytest.raises(ValidationError):
        bank_balance_service.create_bank_balance(0, 1, 0)


def test_balances_ordered_by_month(bank_balance_service):
    for month in (3, 1, 2):
        bank_balance_service.get_or_create_bank_balance(2024, month)
    bank_balance_service.get_or_create_bank_balance(2023, 12)

    assert [b.month for b in bank_balance_service.get_bank_balances_by_year(2024)] == [1, 2, 3]
    assert [(b.year, b.month) for b in bank_balance_service.get_all_bank_balances()] == [
        (2023, 12),
        (2024, 1),
        (2024, 2),
        (2024, 3),
    ]
