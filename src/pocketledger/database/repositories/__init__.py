"""Repositories: one per entity, all sharing the query executor."""

from pocketledger.database.repositories.account import AccountRepository
from pocketledger.database.repositories.bank_balance import BankBalanceRepository
from pocketledger.database.repositories.base import Repository
from pocketledger.database.repositories.budget import BudgetRepository
from pocketledger.database.repositories.category import CategoryRepository
from pocketledger.database.repositories.transaction import TransactionRepository

__all__ = [
    "AccountRepository",
    "BankBalanceRepository",
    "BudgetRepository",
    "CategoryRepository",
    "Repository",
    "TransactionRepository",
]
