"""Tests for amount parser."""

from decimal import Decimal

import pytest

from pocketledger.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("$1,234.56", Decimal("1234.56")),
        ("-50", Decimal("-50.00")),
        ("(50.00)", Decimal("-50.00")),
        ("€ 7.5", Decimal("7.50")),
        ("0.005", Decimal("0.01")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "12.3.4"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)
