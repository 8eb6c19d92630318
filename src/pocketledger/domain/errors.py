"""Shared domain error messages and error types."""

from contextlib import contextmanager
from typing import Iterator


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class DatabaseNotInitializedError(RuntimeError):
    """The query executor was used before a database handle was bound."""


class ConcurrentOperationError(RuntimeError):
    """A guarded schema operation is already running."""


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction by ID."""
    return f"Transaction {transaction_id} not found"


def budget_not_found(budget_id: int) -> str:
    """Return message for missing budget by ID."""
    return f"Budget {budget_id} not found"


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def bank_balance_not_found(year: int, month: int) -> str:
    """Return message for a month without a bank balance record."""
    return f"No bank balance recorded for {year}-{month:02d}"


def category_type_mismatch(category_type: str, transaction_type: str) -> str:
    """Return message when a transaction's type differs from its category's."""
    return (
        f"Category type '{category_type}' does not match transaction type '{transaction_type}'"
    )


def invalid_date_range(start, end) -> str:
    """Return message for a start date that is not before the end date."""
    return f"Start date {start} must be before end date {end}"


def category_in_use(category_id: int, transaction_count: int, budget_count: int) -> str:
    """Return message when a category still has transactions or budgets."""
    parts = []
    if transaction_count > 0:
        parts.append(f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}")
    if budget_count > 0:
        parts.append(f"{budget_count} budget{'s' if budget_count != 1 else ''}")
    return (
        f"Cannot delete category {category_id}: it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please reassign or delete them first."
    )


@contextmanager
def validation_errors() -> Iterator[None]:
    """Re-raise plain ValueErrors from value coercion as ValidationError."""
    try:
        yield
    except DomainError:
        raise
    except ValueError as e:
        raise ValidationError(str(e)) from e
