"""
Analytics - Integer unit handling.

On-chain amounts arrive as decimal strings, hex strings or ints in the
smallest denomination (lamports, uatom, MIST, octas, bytes) and often
exceed 2**53. They stay Python ints until the final rounding step.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from fractions import Fraction
from typing import Union


Number = Union[int, Fraction, Decimal, float]


def parse_int_amount(raw: Union[int, str]) -> int:
    """
    Parse an integer amount from a provider payload.

    Accepts ints, decimal strings ("123") and hex strings ("0x7b").

    Raises:
        ValueError: Value is not an integer amount
        TypeError: Value has an unsupported type
    """
    if isinstance(raw, bool):
        raise TypeError("boolean is not an amount")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if text.lower().startswith("0x"):
            return int(text, 16)
        return int(text, 10)
    raise TypeError(f"unsupported amount type: {type(raw).__name__}")


def divide_round(amount: int, divisor: int, rounding: str = ROUND_HALF_UP) -> int:
    """
    Exact integer division with ROUND_HALF_UP or ROUND_FLOOR.

    Args:
        amount: Non-negative integer amount
        divisor: Positive integer divisor
        rounding: decimal.ROUND_HALF_UP or decimal.ROUND_FLOOR
    """
    if divisor <= 0:
        raise ValueError("divisor must be positive")

    quotient, remainder = divmod(amount, divisor)
    if rounding == ROUND_FLOOR:
        return quotient
    if rounding == ROUND_HALF_UP:
        return quotient + 1 if remainder * 2 >= divisor else quotient
    raise ValueError(f"unsupported rounding mode: {rounding}")


def to_whole_units(amount: int, decimals: int, rounding: str = ROUND_HALF_UP) -> int:
    """Smallest-denomination amount -> whole tokens (e.g. uatom -> ATOM with decimals=6)."""
    return divide_round(amount, 10 ** decimals, rounding)


def round_half_up(value: Number, places: int = 0) -> Decimal:
    """Round half away from zero, the way dashboards display percentages."""
    if isinstance(value, Fraction):
        exact = Decimal(value.numerator) / Decimal(value.denominator)
    else:
        exact = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    return exact.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def percentage(part: int, total: int, places: int = 1) -> float:
    """part / total * 100, computed exactly and rounded half-up."""
    if total <= 0:
        raise ValueError("total must be positive")
    return float(round_half_up(Fraction(part * 100, total), places))


def whole_percentage(part: int, total: int) -> int:
    """part / total * 100 rounded half-up to an integer."""
    if total <= 0:
        raise ValueError("total must be positive")
    return divide_round(part * 100, total)
