# Overview: Decimal money helpers shared by the cart, services and model serializers.

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Quantize to cents with half-up rounding. None counts as zero."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_rate(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def money_to_json(value: Any) -> float | None:
    """JSON has no decimal type; amounts leave the API as floats rounded to cents."""
    if value is None:
        return None
    return float(to_money(value))
