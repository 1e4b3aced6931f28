"""
Money Utilities - Safe Decimal operations for monetary values.

Avoids float precision issues by using Decimal throughout.
Quantity clamping lives here as well since it feeds every price total.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

Number = Union[str, int, float, Decimal]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")

# Precision for integer currencies (JPY, KRW, etc.)
INTEGER_PRECISION = Decimal("1")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "KRW": "₩",
    "INR": "₹",
    "TRY": "₺",
}

INTEGER_CURRENCIES = {"JPY", "KRW"}

# Symbol goes before the amount for these
PREFIX_CURRENCIES = {"USD", "EUR", "GBP", "JPY", "INR"}


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        # Floats go through str to keep the shortest repr (0.1 -> "0.1")
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Number, to_int: bool = False) -> Decimal:
    """
    Round monetary value to appropriate precision.

    Args:
        value: Value to round
        to_int: If True, round to integer (for JPY, KRW, etc.)

    Returns:
        Rounded Decimal value
    """
    decimal_value = to_decimal(value)
    precision = INTEGER_PRECISION if to_int else MONEY_PRECISION
    return decimal_value.quantize(precision, rounding=ROUND_HALF_UP)


def format_money(value: Number, currency: str = "USD") -> str:
    """
    Format monetary value with currency symbol.

    Args:
        value: Value to format
        currency: Currency code (USD, EUR, JPY, etc.)

    Returns:
        Formatted string, e.g. "$1,234.50" or "1,234.50 ₺"
    """
    currency = (currency or "USD").upper()
    decimal_value = to_decimal(value)
    symbol = CURRENCY_SYMBOLS.get(currency, currency)

    if currency in INTEGER_CURRENCIES:
        formatted = f"{int(round_money(decimal_value, to_int=True)):,}"
    else:
        formatted = f"{round_money(decimal_value):,.2f}"

    if formatted.startswith("-"):
        sign, formatted = "-", formatted[1:]
    else:
        sign = ""

    if currency in PREFIX_CURRENCIES:
        return f"{sign}{symbol}{formatted}"
    return f"{sign}{formatted} {symbol}"


def to_float(value: Number) -> float:
    """
    Convert Decimal to float for JSON serialization.

    Use only at API boundaries, not for internal calculations.
    """
    return float(to_decimal(value))


def add(a: Number, b: Number) -> Decimal:
    """Safe addition of monetary values."""
    return to_decimal(a) + to_decimal(b)


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def clamp_quantity(value, minimum: int = 1, maximum: Optional[int] = None) -> int:
    """
    Coerce a quantity to an int within [minimum, maximum].

    Invalid values (None, non-numeric strings, NaN) yield the minimum.
    Fractional values are truncated toward zero before clamping.

    Args:
        value: Raw quantity (int, str, float, Decimal)
        minimum: Lowest allowed quantity
        maximum: Highest allowed quantity, or None for no upper bound

    Returns:
        Clamped integer quantity
    """
    if isinstance(value, bool):
        return minimum
    if isinstance(value, int):
        quantity = value
    else:
        try:
            quantity = int(to_decimal(value))
        except (ValueError, OverflowError):
            # NaN / Infinity
            return minimum
    if quantity < minimum:
        return minimum
    if maximum is not None and quantity > maximum:
        return maximum
    return quantity
