# services/currency_conversion.py
"""
USD -> IDR conversion used when amounts moved to whole-rupiah DECIMAL(15,0).

The migration decides per row whether an amount is still USD-scale by
comparing against a threshold; rows at or above it are assumed to be IDR
already and are left alone. The SQL expressions below and the Python
functions apply the same rule and the same rounding, so tests and data
fix-up scripts can reason about a row without a database.

The multiplication happens on the original NUMERIC(12,2) / NUMERIC(10,2)
value, before rounding to whole rupiah: 10.50 USD becomes 157500 IDR. The
first version of this migration changed the column type first, which
rounded 10.50 to 11 and then stored 165000.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, str, Decimal]

# Approximate rate at the time of the switch to IDR.
USD_TO_IDR_RATE = 15000

# Projects are classified by targetAmount; current amount follows the target.
PROJECT_USD_THRESHOLD = 100_000
# Donations are classified by their own amount.
DONATION_USD_THRESHOLD = 10_000

_WHOLE = Decimal("1")
_CENTS = Decimal("0.01")


def usd_to_idr(amount: Number) -> Decimal:
    """ROUND(amount * rate), half away from zero like PostgreSQL's ROUND(numeric)."""
    return (Decimal(str(amount)) * USD_TO_IDR_RATE).quantize(_WHOLE, rounding=ROUND_HALF_UP)


def idr_to_usd(amount: Number) -> Decimal:
    """ROUND(amount / rate, 2)."""
    return (Decimal(str(amount)) / USD_TO_IDR_RATE).quantize(_CENTS, rounding=ROUND_HALF_UP)


def project_amounts_to_idr(target_amount: Number, current_amount: Number) -> tuple[Decimal, Decimal]:
    """Convert a project's (target, current) pair the way the migration does."""
    target = Decimal(str(target_amount))
    current = Decimal(str(current_amount))
    if target < PROJECT_USD_THRESHOLD:
        return usd_to_idr(target), usd_to_idr(current)
    return target.quantize(_WHOLE, rounding=ROUND_HALF_UP), current.quantize(_WHOLE, rounding=ROUND_HALF_UP)


def donation_amount_to_idr(amount: Number) -> Decimal:
    value = Decimal(str(amount))
    if value < DONATION_USD_THRESHOLD:
        return usd_to_idr(value)
    return value.quantize(_WHOLE, rounding=ROUND_HALF_UP)


# ─── SQL (PostgreSQL ALTER COLUMN ... USING) ───────────────────────
# The conversion happens inside the type change so the original cents are
# multiplied before the scale drops to 0 and the wider precision is
# already in effect for the result.

def to_idr_using(column: str, classify_by: str, threshold: int) -> str:
    return (
        f'CASE WHEN "{classify_by}" < {threshold} '
        f'THEN ROUND("{column}" * {USD_TO_IDR_RATE}) '
        f'ELSE ROUND("{column}") END'
    )


def to_usd_using(column: str, classify_by: str, threshold: int) -> str:
    return (
        f'CASE WHEN "{classify_by}" > {threshold} '
        f'THEN ROUND("{column}" / {USD_TO_IDR_RATE}, 2) '
        f'ELSE "{column}" END'
    )
