"""Value coercion helpers shared by mappers, patches and services."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional, TypeVar

CENT = Decimal("0.01")

E = TypeVar("E", bound=Enum)


def to_money(value: Any) -> Decimal:
    """Convert a stored or user-supplied amount into a cent-precision Decimal.

    SQLite hands back NUMERIC columns and SUM() results as int or float;
    going through ``str`` keeps 12.34 from turning into 12.339999...

    Raises:
        ValueError: If the value is not a number or has too many digits
    """
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Could not parse amount '{value}': {e}")
    if not amount.is_finite():
        raise ValueError(f"Amount must be a finite number, got '{value}'")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Amount '{value}' is out of range")


def to_date(value: Any) -> date:
    """Convert an ISO string, datetime or date into a date.

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Expected a date, got {value!r}")


def to_datetime(value: Any) -> Optional[datetime]:
    """Parse a stored timestamp; None stays None."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def to_enum(enum_cls: type[E], value: Any) -> E:
    """Convert a raw value into ``enum_cls``.

    Raises:
        ValueError: If the value is not a member of the enum
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {enum_cls.__name__} '{value}' (expected one of: {allowed})")


def to_db(value: Any) -> Any:
    """Convert a Python value into something the SQLite driver can bind."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return value
