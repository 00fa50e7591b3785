"""Utility helpers for calculator modules."""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal

KOBO = Decimal("0.01")
RATE_PRECISION = Decimal("0.0001")


def format_percentage(value: Decimal) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = value * 100
    if percentage == percentage.to_integral_value():
        return f"{int(percentage)}%"
    return f"{percentage.quantize(KOBO)}%"


def round_currency(value: Decimal) -> Decimal:
    """Round monetary amounts to the nearest kobo using banker's rounding."""

    return value.quantize(KOBO, rounding=ROUND_HALF_EVEN)


def round_rate(value: Decimal) -> Decimal:
    """Round rate values to four decimals."""

    return value.quantize(RATE_PRECISION, rounding=ROUND_HALF_EVEN)


def format_naira(value: Decimal) -> str:
    if value == value.to_integral_value():
        return f"₦{int(value):,}"
    return f"₦{round_currency(value):,}"
