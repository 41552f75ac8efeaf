from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CENT = Decimal("0.01")
QUANTITY_STEP = Decimal("0.001")


def to_decimal(value: Any) -> Decimal:
    """
    Convert JSON-ish input (int, float, numeric string, Decimal) to Decimal.

    Floats go through str() so 0.1 stays 0.1 rather than its binary expansion.
    Raises ValueError for booleans, non-numeric strings, NaN and infinity.
    """
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"not a number: {value!r}")
    else:
        raise ValueError(f"not a number: {value!r}")

    if not result.is_finite():
        raise ValueError("number must be finite")
    return result


def quantize_money(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_quantity(value: Any) -> Decimal:
    return to_decimal(value).quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def money_str(value: Optional[Any]) -> Optional[str]:
    """Fixed-point string for stored currency fields ("3.50")."""
    if value is None:
        return None
    return str(quantize_money(value))


def quantity_str(value: Optional[Any]) -> Optional[str]:
    """Quantity string with trailing zeros dropped ("0.25", "2")."""
    if value is None:
        return None
    q = quantize_quantity(value).normalize()
    # normalize() turns 100 into 1E+2
    return format(q, "f")


def money_float(value: Any) -> float:
    """JSON number for derived/aggregated amounts, rounded to cents."""
    return float(quantize_money(value))
