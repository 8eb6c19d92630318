"""Amount parsing for command-line input."""

import re
from decimal import Decimal, InvalidOperation

from pocketledger.utils.values import to_money

_CURRENCY = re.compile(r"[$€£¥]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a cent-precision Decimal.

    Handles "123.45", "$1,234.56", "-50" and "(50.00)" (negative).

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    text = _CURRENCY.sub("", text).replace(",", "").strip()

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return to_money(-amount if negative else amount)
