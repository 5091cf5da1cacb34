# backend/woundcrm/core/money.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

NumberLike = Union[Decimal, int, float, str, None]

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: NumberLike) -> Decimal:
    """
    Lenient numeric coercion for in-progress form values.

    Missing, blank, malformed, non-finite and negative inputs all become 0.
    Accepts "$1,190.44" and "15%" style strings.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        d = Decimal(str(value))
    else:
        s = str(value).strip().replace("$", "").replace(",", "").rstrip("%").strip()
        if not s:
            return ZERO
        try:
            d = Decimal(s)
        except InvalidOperation:
            return ZERO

    if not d.is_finite() or d < 0:
        return ZERO
    return d


def quantize_cents(value: Decimal) -> Decimal:
    try:
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # too many digits for the context; same as any other malformed amount
        return ZERO
