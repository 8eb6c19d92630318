"""Domain layer for pocketledger.

Services are exported lazily; the repositories they import map rows into
``pocketledger.domain.entities``, so importing them eagerly here would loop.
"""

_SERVICES = {
    "AccountService": "pocketledger.domain.account",
    "BankBalanceService": "pocketledger.domain.bank_balance",
    "BudgetService": "pocketledger.domain.budget",
    "CategoryService": "pocketledger.domain.category",
    "ReportService": "pocketledger.domain.report",
    "TransactionService": "pocketledger.domain.transaction",
}

__all__ = sorted(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
