"""Conversions between base units and human decimal strings.

Amounts are plain ``int`` (arbitrary precision); floats never touch them.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

from ..config import NATIVE_DECIMALS

DISPLAY_FRACTION_DIGITS = 6


def format_units(amount: int, decimals: int) -> str:
    """Exact decimal string of ``amount`` base units, trailing zeros removed."""
    if amount < 0:
        raise ValueError("Amount must be unsigned")
    if decimals == 0:
        return str(amount)
    whole, frac = divmod(amount, 10**decimals)
    frac_text = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{whole}.{frac_text}" if frac_text else str(whole)


def parse_units(value: str, decimals: int) -> int:
    """Convert a decimal string to base units, rejecting excess precision."""
    try:
        number = Decimal(value.strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal amount: {value!r}") from exc
    if not number.is_finite() or number < 0:
        raise ValueError(f"Amount must be a non-negative number: {value!r}")
    with localcontext() as ctx:
        ctx.prec = max(len(number.as_tuple().digits) + decimals, 28)
        scaled = number.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{value} has more than {decimals} decimal places")
        return int(scaled)


def truncate_display(text: str, digits: int = DISPLAY_FRACTION_DIGITS) -> str:
    """Cut (never round) a decimal string to exactly ``digits`` fraction digits."""
    whole, _, frac = text.partition(".")
    if digits == 0:
        return whole
    return f"{whole}.{frac[:digits].ljust(digits, '0')}"


def format_native_tokens(amount: int) -> str:
    return format_units(amount, NATIVE_DECIMALS)


def convert_to_native_tokens(value: str) -> int:
    return parse_units(value, NATIVE_DECIMALS)
