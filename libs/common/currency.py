"""Money helpers.

All amounts are ``Decimal`` in the store currency, rounded half-up to cents.
Floats never enter price arithmetic.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

# ─── constants ───────────────────────────────────────────────────────────────

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, str]


# ─── helpers ─────────────────────────────────────────────────────────────────


def to_money(value: Number) -> Decimal:
    """Coerce to a cent-rounded Decimal. Strings and ints are accepted."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Number, percent: Number) -> Decimal:
    """Return ``percent``% of ``amount``, e.g. percent_of(200, 10) == 20.00."""
    return to_money(Decimal(str(amount)) * Decimal(str(percent)) / Decimal(100))


def line_total(quantity: int, unit_price: Number) -> Decimal:
    return to_money(to_money(unit_price) * quantity)
