"""Utility functions for pocketledger."""

from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import get_date_range, parse_date

__all__ = ["get_date_range", "parse_amount", "parse_date"]
