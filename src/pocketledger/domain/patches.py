"""Typed partial-update structures.

Each patch's dataclass fields are the allow-list of columns an update may
touch; identity and bookkeeping columns (id, created_at, updated_at) are
never fields, so they can never be written through an update. ``None``
means "leave unchanged". Nullable columns get an explicit ``clear_*`` flag.
"""

from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, TypeVar, Union

from pocketledger.domain.entities import AccountType, BudgetPeriod, TransactionType
from pocketledger.domain.errors import ValidationError
from pocketledger.utils.values import to_date, to_enum, to_money

P = TypeVar("P", bound="Patch")


@dataclass(frozen=True)
class Patch:
    """Base class for entity patches."""

    @classmethod
    def updatable_fields(cls) -> tuple[str, ...]:
        """Column names this patch may write."""
        return tuple(f.name for f in fields(cls) if not f.name.startswith("clear_"))

    @classmethod
    def from_mapping(cls: type[P], data: Mapping[str, Any]) -> P:
        """Build a patch from free-form input, dropping keys outside the allow-list."""
        allowed = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in allowed})

    def changes(self) -> dict[str, Any]:
        """Return {column: value} for every field that was set."""
        result = {}
        for name in self.updatable_fields():
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        return result

    def is_empty(self) -> bool:
        return not self.changes()

    def _coerce(self, name: str, converter) -> None:
        value = getattr(self, name)
        if value is not None:
            object.__setattr__(self, name, converter(value))


@dataclass(frozen=True)
class CategoryPatch(Patch):
    name: Optional[str] = None
    type: Optional[TransactionType] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_default: Optional[bool] = None
    is_active: Optional[bool] = None

    def __post_init__(self):
        self._coerce("type", lambda v: to_enum(TransactionType, v))
        self._coerce("sort_order", int)
        self._coerce("is_default", bool)
        self._coerce("is_active", bool)


@dataclass(frozen=True)
class TransactionPatch(Patch):
    amount: Optional[Decimal] = None
    type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    date: Optional[date] = None
    description: Optional[str] = None
    budget_id: Optional[int] = None
    account_id: Optional[int] = None
    clear_budget: bool = False
    clear_account: bool = False

    def __post_init__(self):
        self._coerce("amount", to_money)
        self._coerce("type", lambda v: to_enum(TransactionType, v))
        self._coerce("date", to_date)
        if self.clear_budget and self.budget_id is not None:
            raise ValueError("Cannot set both budget_id and clear_budget")
        if self.clear_account and self.account_id is not None:
            raise ValueError("Cannot set both account_id and clear_account")

    def changes(self) -> dict[str, Any]:
        result = super().changes()
        if self.clear_budget:
            result["budget_id"] = None
        if self.clear_account:
            result["account_id"] = None
        return result


@dataclass(frozen=True)
class BudgetPatch(Patch):
    name: Optional[str] = None
    category_id: Optional[int] = None
    amount: Optional[Decimal] = None
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: Optional[str] = None

    def __post_init__(self):
        self._coerce("amount", to_money)
        self._coerce("period", lambda v: to_enum(BudgetPeriod, v))
        self._coerce("start_date", to_date)
        self._coerce("end_date", to_date)


@dataclass(frozen=True)
class BankBalancePatch(Patch):
    opening_balance: Optional[Decimal] = None
    closing_balance: Optional[Decimal] = None

    def __post_init__(self):
        self._coerce("opening_balance", to_money)
        self._coerce("closing_balance", to_money)


@dataclass(frozen=True)
class AccountPatch(Patch):
    name: Optional[str] = None
    type: Optional[AccountType] = None
    opening_balance: Optional[Decimal] = None
    closing_balance: Optional[Decimal] = None

    def __post_init__(self):
        self._coerce("type", lambda v: to_enum(AccountType, v))
        self._coerce("opening_balance", to_money)
        self._coerce("closing_balance", to_money)


def as_patch(patch_cls: type[P], data: Union[P, Mapping[str, Any], None]) -> P:
    """Accept either a ready patch or a mapping and return a patch.

    Raises:
        ValidationError: If a value cannot be coerced to its field type
    """
    if data is None:
        return patch_cls()
    if isinstance(data, patch_cls):
        return data
    try:
        return patch_cls.from_mapping(data)
    except ValidationError:
        raise
    except ValueError as e:
        raise ValidationError(str(e)) from e
