"""Application context: the explicitly constructed object graph.

Every process-wide collaborator (query executor, event bus, lifecycle
manager, repositories and services) lives on one ``AppContext``, so tests
can build as many isolated instances as they need.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pocketledger.config import Settings, load_settings
from pocketledger.database.executor import SQLAlchemyQueryExecutor
from pocketledger.database.factories import create_sqlite_engine
from pocketledger.database.lifecycle import DatabaseLifecycleManager
from pocketledger.database.repositories import (
    AccountRepository,
    BankBalanceRepository,
    BudgetRepository,
    CategoryRepository,
    TransactionRepository,
)
from pocketledger.domain.account import AccountService
from pocketledger.domain.bank_balance import BankBalanceService
from pocketledger.domain.budget import BudgetService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.events import EventBus
from pocketledger.domain.handlers import register_budget_handlers
from pocketledger.domain.report import ReportService
from pocketledger.domain.transaction import TransactionService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Holds the collaborators of one application instance."""

    settings: Settings
    executor: SQLAlchemyQueryExecutor
    event_bus: EventBus
    lifecycle: DatabaseLifecycleManager
    categories: CategoryService
    transactions: TransactionService
    budgets: BudgetService
    bank_balances: BankBalanceService
    accounts: AccountService
    reports: ReportService
    _unsubscribe_handlers: Optional[Callable[[], None]] = None

    def initialize(self):
        """Initialize the database (idempotent)."""
        return self.lifecycle.initialize()

    def reset(self):
        """Drop, recreate and reseed the database."""
        return self.lifecycle.reset()

    def close(self) -> None:
        """Remove handlers and release the database."""
        if self._unsubscribe_handlers is not None:
            self._unsubscribe_handlers()
            self._unsubscribe_handlers = None
        self.executor.close()


def create_app_context(
    settings: Optional[Settings] = None,
    database_path: Optional[str] = None,
    initialize: bool = True,
) -> AppContext:
    """Build an application context.

    Args:
        settings: Settings to use. If None, loaded from the environment with
            ``database_path`` overriding the configured path.
        database_path: Path to the SQLite database file
        initialize: Run database initialization before returning

    Returns:
        Wired AppContext
    """
    if settings is None:
        settings = load_settings(database_path=database_path)

    executor = SQLAlchemyQueryExecutor(create_sqlite_engine(settings.database_path))
    event_bus = EventBus()
    lifecycle = DatabaseLifecycleManager(executor, settings, event_bus=event_bus)

    category_repo = CategoryRepository(executor)
    transaction_repo = TransactionRepository(executor)
    budget_repo = BudgetRepository(executor)
    balance_repo = BankBalanceRepository(executor)
    account_repo = AccountRepository(executor)

    accounts = AccountService(account_repo, transaction_repo)
    budgets = BudgetService(budget_repo, category_repo, transaction_repo, event_bus=event_bus)
    context = AppContext(
        settings=settings,
        executor=executor,
        event_bus=event_bus,
        lifecycle=lifecycle,
        categories=CategoryService(category_repo, transaction_repo, budget_repo, event_bus=event_bus),
        transactions=TransactionService(
            executor, transaction_repo, category_repo, budget_repo, accounts, event_bus=event_bus
        ),
        budgets=budgets,
        bank_balances=BankBalanceService(executor, balance_repo),
        accounts=accounts,
        reports=ReportService(transaction_repo, category_repo, account_repo),
    )
    context._unsubscribe_handlers = register_budget_handlers(event_bus, budgets)

    if initialize:
        context.initialize()
    logger.debug(f"Application context ready for {settings.database_path}")
    return context
