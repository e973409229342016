"""
Amount Handling Module

Parses operator-entered amounts into Decimal and renders balances for log
lines and summaries. NEVER uses float for monetary values.
"""

from decimal import Decimal, InvalidOperation, getcontext
from typing import Union
import re

# Set global decimal context for financial precision
getcontext().prec = 28  # High precision for financial calculations

AmountLike = Union[Decimal, int, str]


CURRENCY_SYMBOLS = "$€£¥"

# Comma only as a thousands separator in well-formed groups of three
GROUPED_NUMBER = re.compile(r'^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$')


def decimal_from_string(value: str) -> Decimal:
    """
    Strictly convert string to Decimal

    Accepts an optional leading currency symbol and commas as thousands
    separators in groups of three ("1,000.50"). Any other stray character or
    comma is rejected rather than guessed at.

    Args:
        value: String representation of number

    Returns:
        Decimal value

    Raises:
        ValueError: If string cannot be converted to valid Decimal
    """
    if not value or not isinstance(value, str):
        raise ValueError("Value must be a non-empty string")

    clean_value = value.strip()
    if clean_value and clean_value[0] in CURRENCY_SYMBOLS:
        clean_value = clean_value[1:].strip()

    if ',' in clean_value:
        if not GROUPED_NUMBER.match(clean_value):
            raise ValueError(f"Ambiguous comma in '{value}'")
        clean_value = clean_value.replace(',', '')

    try:
        result = Decimal(clean_value)
    except InvalidOperation:
        raise ValueError(f"Cannot convert '{value}' to Decimal")

    if not result.is_finite():
        raise ValueError(f"Cannot convert '{value}' to Decimal")
    return result


def to_decimal(value: AmountLike) -> Decimal:
    """Coerce an amount to Decimal without going through float"""
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Amount must be finite, got {value}")
        return value
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        return decimal_from_string(value)
    raise ValueError(f"Unsupported amount type: {type(value).__name__}")


def parse_amount(value: AmountLike) -> Decimal:
    """
    Parse a transaction amount

    Raises:
        ValueError: If the amount is not a number or is not positive
    """
    amount = to_decimal(value)
    if amount <= Decimal('0'):
        raise ValueError("Amount must be positive")
    return amount


def parse_balance(value: AmountLike) -> Decimal:
    """Parse an opening balance (zero allowed, negative rejected)"""
    balance = to_decimal(value)
    if balance < Decimal('0'):
        raise ValueError("Initial balance cannot be negative")
    return balance


def format_amount(value: Decimal) -> str:
    """
    Format for display in log lines and summaries

    Always at least one fractional digit, no trailing zeros beyond it:
    50 -> "50.0", 150.00 -> "150.0", 0.10 -> "0.1".
    """
    text = format(value.normalize(), 'f')
    if '.' not in text:
        text += '.0'
    return text
