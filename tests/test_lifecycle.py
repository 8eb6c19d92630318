"""Tests for database initialization, reset and data clearing."""

import threading
import time
from datetime import date
from decimal import Decimal

import pytest

from pocketledger.config import Settings
from pocketledger.database.executor import SQLAlchemyQueryExecutor
from pocketledger.database.lifecycle import DatabaseLifecycleManager
from pocketledger.database.schema import TABLE_NAMES
from pocketledger.domain.defaults import DEFAULT_CATEGORIES
from pocketledger.domain.errors import ConcurrentOperationError
from pocketledger.domain.events import TRANSACTION_UPDATED, EventBus


@pytest.fixture
def manager(settings):
    """Lifecycle manager with an unbound executor."""
    executor = SQLAlchemyQueryExecutor()
    manager = DatabaseLifecycleManager(executor, settings, event_bus=EventBus())

    yield manager

    executor.close()


def category_names(executor):
    return [row["name"] for row in executor.execute_query("SELECT name FROM categories").rows]


def test_initialize_creates_tables_and_seeds(manager):
    """Test first initialization on an empty database."""
    result = manager.initialize()

    assert set(result.created_tables) == set(TABLE_NAMES)
    assert result.seeded_categories == len(DEFAULT_CATEGORIES)
    assert result.cleared_tables == ()
    assert manager.is_initialized
    assert sorted(manager.executor.list_tables()) == sorted(TABLE_NAMES)


def test_initialize_twice_returns_same_result(manager):
    """Test repeat calls share the first pass."""
    first = manager.initialize()
    second = manager.initialize()

    assert second is first
    assert len(category_names(manager.executor)) == len(DEFAULT_CATEGORIES)


def test_concurrent_initialize_runs_once(manager, monkeypatch):
    """Test concurrent callers wait for a single initialization pass."""
    passes = []
    original = DatabaseLifecycleManager._initialize

    def slow_initialize(self, engine):
        passes.append(threading.get_ident())
        time.sleep(0.05)
        return original(self, engine)

    monkeypatch.setattr(DatabaseLifecycleManager, "_initialize", slow_initialize)

    barrier = threading.Barrier(4)
    results = []
    errors = []

    def worker():
        barrier.wait()
        try:
            results.append(manager.initialize())
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(passes) == 1
    assert len(results) == 4
    assert all(result is results[0] for result in results)

    names = category_names(manager.executor)
    assert len(names) == len(set(names)) == len(DEFAULT_CATEGORIES)


def test_existing_database_is_not_reseeded(app, settings):
    """Test a second manager on a populated database creates and seeds nothing."""
    app.categories.create_category(name="Pets", type="expense")

    executor = SQLAlchemyQueryExecutor()
    manager = DatabaseLifecycleManager(executor, settings)
    try:
        result = manager.initialize()
    finally:
        executor.close()

    assert result.created_tables == ()
    assert result.seeded_categories == 0
    assert len(app.categories.get_categories()) == len(DEFAULT_CATEGORIES) + 1


def test_missing_table_is_recreated(app, settings):
    """Test only absent tables are created."""
    app.executor.execute_query("DROP TABLE bank_balances")

    executor = SQLAlchemyQueryExecutor()
    manager = DatabaseLifecycleManager(executor, settings)
    try:
        result = manager.initialize()
    finally:
        executor.close()

    assert result.created_tables == ("bank_balances",)
    assert result.seeded_categories == 0


def test_seeding_skips_existing_names(manager):
    """Test default categories are deduplicated by name."""
    manager.initialize()
    executor = manager.executor
    executor.execute_query("DELETE FROM categories WHERE name <> 'Dining'")

    seeded = executor.transaction(manager._seed_default_categories)

    assert seeded == len(DEFAULT_CATEGORIES) - 1
    names = category_names(executor)
    assert names.count("Dining") == 1
    assert len(names) == len(DEFAULT_CATEGORIES)


def test_data_clear_drops_everything(app, temp_db_path):
    """Test the data-clear flag wipes all tables before initializing."""
    category = app.categories.create_category(name="Pets", type="expense")
    app.transactions.create_transaction(Decimal("5"), "expense", category.id, date(2024, 1, 1))
    app.executor.execute_query("CREATE TABLE legacy (id INTEGER PRIMARY KEY)")

    executor = SQLAlchemyQueryExecutor()
    manager = DatabaseLifecycleManager(executor, Settings(database_path=temp_db_path, data_clear=True))
    try:
        result = manager.initialize()
        assert "legacy" in result.cleared_tables
        assert set(TABLE_NAMES) <= set(result.cleared_tables)
        assert set(result.created_tables) == set(TABLE_NAMES)
        assert result.seeded_categories == len(DEFAULT_CATEGORIES)
        assert not executor.table_exists("legacy")
        assert "Pets" not in category_names(executor)
        assert executor.foreign_keys_enabled()
    finally:
        executor.close()


@pytest.mark.parametrize("year", [2023, 2024])
def test_reset_restores_fresh_state(app, year):
    """Test every entity is back to a fresh install after reset."""
    category = app.categories.create_category(name="Pets", type="expense")
    account = app.accounts.create_account(name="Wallet", type="cash")
    app.budgets.create_budget("Pets", category.id, Decimal("100"), date(year, 1, 1), date(year, 1, 31))
    app.transactions.create_transaction(
        Decimal("20"), "expense", category.id, date(year, 1, 5), account_id=account.id
    )
    app.bank_balances.initialize_year(year, 1)

    result = app.reset()

    assert set(result.created_tables) == set(TABLE_NAMES)
    assert result.seeded_categories == len(DEFAULT_CATEGORIES)
    assert app.transactions.get_transactions() == []
    assert app.budgets.get_budgets() == []
    assert app.accounts.list_accounts() == []
    assert app.bank_balances.get_bank_balances_by_year(year) == []
    categories = app.categories.get_categories()
    assert [c.name for c in categories] == [name for name, _, _, _ in DEFAULT_CATEGORIES]
    assert all(c.is_default for c in categories)
    assert app.executor.foreign_keys_enabled()


def test_reset_publishes_event(app):
    """Test views listening on any refresh topic hear about a reset."""
    seen = []
    app.event_bus.subscribe(TRANSACTION_UPDATED, seen.append)

    app.reset()

    assert [event.event_type for event in seen] == ["DatabaseReset"]


def test_reset_failure_rolls_back(app, monkeypatch):
    """Test a reset failing partway leaves the old tables and data in place."""
    category = app.categories.create_category(name="Pets", type="expense")
    app.transactions.create_transaction(Decimal("20"), "expense", category.id, date(2024, 1, 5))

    def fail(executor):
        raise RuntimeError("seeding failed")

    monkeypatch.setattr(app.lifecycle, "_seed_default_categories", fail)

    with pytest.raises(RuntimeError, match="seeding failed"):
        app.reset()

    assert sorted(app.executor.list_tables()) == sorted(TABLE_NAMES)
    assert len(app.transactions.get_transactions()) == 1
    assert app.categories.get_category_by_id(category.id) is not None
    assert app.executor.foreign_keys_enabled()
    assert not app.lifecycle.is_resetting


def test_reset_rejects_concurrent_reset(app, monkeypatch):
    """Test a reset requested while one runs is refused, not queued."""
    original = app.lifecycle._seed_default_categories
    nested_errors = []

    def seed_and_retry(executor):
        assert app.lifecycle.is_resetting
        try:
            app.reset()
        except ConcurrentOperationError as e:
            nested_errors.append(e)
        return original(executor)

    monkeypatch.setattr(app.lifecycle, "_seed_default_categories", seed_and_retry)

    result = app.reset()

    assert len(nested_errors) == 1
    assert "reset already in progress" in str(nested_errors[0])
    assert result.seeded_categories == len(DEFAULT_CATEGORIES)
    assert not app.lifecycle.is_resetting


def test_reset_rejected_during_initialization(manager, monkeypatch):
    """Test reset is refused while initialization holds the schema."""
    original = manager._create_missing_tables
    errors = []

    def create_and_reset(executor):
        assert manager.is_initializing
        try:
            manager.reset()
        except ConcurrentOperationError as e:
            errors.append(e)
        return original(executor)

    monkeypatch.setattr(manager, "_create_missing_tables", create_and_reset)

    manager.initialize()

    assert len(errors) == 1
    assert "initialization in progress" in str(errors[0])
    assert not manager.is_resetting
