"""Progressive tax allocation across a bracket schedule."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from naijapaye.backend.app.models.engine import ZERO, BracketTax, TaxComputation, as_decimal
from naijapaye.backend.config.brackets import schedule_issues
from naijapaye.backend.config.schema import BracketScheduleError, TaxBracket

from .utils import format_naira, format_percentage, round_currency


def bracket_label(bracket: TaxBracket) -> str:
    """Return a human-readable range label such as ``₦800,000 - ₦3,000,000 @ 15%``."""

    rate = format_percentage(bracket.rate)
    if bracket.upper_bound is None:
        return f"Above {format_naira(bracket.lower_bound)} @ {rate}"
    return (
        f"{format_naira(bracket.lower_bound)} - {format_naira(bracket.upper_bound)} @ {rate}"
    )


def compute_tax(
    annual_taxable_income: Decimal | int | float,
    brackets: Sequence[TaxBracket],
) -> TaxComputation:
    """Allocate ``annual_taxable_income`` across ``brackets`` and sum the tax.

    Brackets cover ``[min, max)`` and are walked in ascending order; each one
    takes at most its own width and the unbounded top bracket absorbs whatever
    is left. Per-bracket tax stays exact and only the total is rounded to kobo.
    """

    income = as_decimal(annual_taxable_income, "annual_taxable_income")
    if not income.is_finite():
        raise ValueError("Annual taxable income must be a finite number")
    if income < 0:
        raise ValueError("Annual taxable income cannot be negative")

    issues = schedule_issues(brackets)
    if issues:
        raise BracketScheduleError([issue.message for issue in issues])

    if income == 0:
        return TaxComputation(total_tax=ZERO)

    breakdown: list[BracketTax] = []
    assigned_total = ZERO

    for bracket in brackets:
        if assigned_total >= income:
            break
        if income <= bracket.lower_bound:
            continue

        above_floor = income - bracket.lower_bound
        width = bracket.width
        assigned = above_floor if width is None else min(width, above_floor)
        if assigned <= 0:
            continue

        breakdown.append(
            BracketTax(
                label=bracket_label(bracket),
                description=bracket.description,
                lower=bracket.lower_bound,
                upper=bracket.upper_bound,
                rate=bracket.rate,
                taxable_amount=assigned,
                tax=assigned * bracket.rate,
            )
        )
        assigned_total += assigned

    total = sum((entry.tax for entry in breakdown), ZERO)
    return TaxComputation(total_tax=round_currency(total), breakdown=tuple(breakdown))


__all__ = ["bracket_label", "compute_tax"]
