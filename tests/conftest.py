"""Shared pytest fixtures for pocketledger tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from pocketledger import logging_setup
from pocketledger.config import Settings
from pocketledger.context import create_app_context


@pytest.fixture(autouse=True)
def quiet_cli_logging(monkeypatch):
    """Keep the CLI from attaching a handler to a stream CliRunner closes."""
    monkeypatch.setattr(logging_setup, "_configured", True)


@pytest.fixture
def temp_db_path():
    """Path to a temporary database file."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings(temp_db_path):
    return Settings(database_path=temp_db_path)


@pytest.fixture
def app(settings):
    """Initialized application context on a temporary database."""
    context = create_app_context(settings=settings)

    yield context

    context.close()


@pytest.fixture
def category_service(app):
    return app.categories


@pytest.fixture
def transaction_service(app):
    return app.transactions


@pytest.fixture
def budget_service(app):
    return app.budgets


@pytest.fixture
def bank_balance_service(app):
    return app.bank_balances


@pytest.fixture
def account_service(app):
    return app.accounts


@pytest.fixture
def report_service(app):
    return app.reports


@pytest.fixture
def expense_category(category_service):
    """A user-created expense category."""
    return category_service.create_category(name="Groceries", type="expense", icon="basket-outline")


@pytest.fixture
def income_category(category_service):
    """A user-created income category."""
    return category_service.create_category(name="Freelance", type="income")


@pytest.fixture
def sample_account(account_service):
    """A bank account opened with 1000.00."""
    return account_service.create_account(name="Checking", type="bank", opening_balance=Decimal("1000.00"))


@pytest.fixture
def march_budget(budget_service, expense_category):
    """A 1000.00 grocery budget for March 2024."""
    return budget_service.create_budget(
        name="March groceries",
        category_id=expense_category.id,
        amount=Decimal("1000.00"),
        start_date=date(2024, 3, 1),
        end_date=date(2024, 3, 31),
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
