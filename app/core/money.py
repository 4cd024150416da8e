"""Currency arithmetic: every amount is a Decimal rounded half away from zero."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
UNIT = Decimal("1")
# Balances at or below this are considered settled.
SETTLED_EPSILON = Decimal("0.01")


def to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def round_money(val: Number) -> Decimal:
    """Round to 2 places, half away from zero."""
    return to_decimal(val).quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(val: Number) -> Decimal:
    """Round to whole currency units, half away from zero."""
    return to_decimal(val).quantize(UNIT, rounding=ROUND_HALF_UP)


def is_settled(balance: Number) -> bool:
    return to_decimal(balance) <= SETTLED_EPSILON


def format_amount(val: Number) -> str:
    """Format like es-PY locale: 1234567.5 -> '1.234.567,5'."""
    value = round_money(val)
    whole, _, frac = f"{value:,.2f}".partition(".")
    whole = whole.replace(",", ".")
    frac = frac.rstrip("0")
    return f"{whole},{frac}" if frac else whole
