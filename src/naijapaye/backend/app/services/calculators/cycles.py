"""Conversion between pay cycles and year-to-date projections."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Any

from naijapaye.backend.app.models.engine import (
    ComputationResult,
    CycleFigures,
    PayCycle,
    YTDProjection,
    as_decimal,
)

# Payroll convention for weeks per month.
WEEKS_PER_MONTH = Decimal("4.33")
MONTHS_PER_YEAR = Decimal("12")
HUNDRED = Decimal("100")


def _to_monthly(amount: Decimal, cycle: PayCycle) -> Decimal:
    if cycle is PayCycle.WEEKLY:
        return amount * WEEKS_PER_MONTH
    if cycle is PayCycle.ANNUAL:
        return amount / MONTHS_PER_YEAR
    return amount


def _from_monthly(amount: Decimal, cycle: PayCycle) -> Decimal:
    if cycle is PayCycle.WEEKLY:
        return amount / WEEKS_PER_MONTH
    if cycle is PayCycle.ANNUAL:
        return amount * MONTHS_PER_YEAR
    return amount


def convert(amount: Decimal | int | float, from_cycle: Any, to_cycle: Any) -> Decimal:
    """Convert ``amount`` between pay cycles via its monthly equivalent."""

    value = as_decimal(amount, "amount")
    if not value.is_finite():
        raise ValueError("Amount must be a finite number")

    source = PayCycle.parse(from_cycle)
    target = PayCycle.parse(to_cycle)
    if source is target:
        return value
    return _from_monthly(_to_monthly(value, source), target)


def validate_cycle_input(cycle: Any, periods_worked: Any) -> list[str]:
    """Return problems with a ``periods_worked`` value for ``cycle``."""

    try:
        pay_cycle = PayCycle.parse(cycle)
    except ValueError as exc:
        return [str(exc)]

    if isinstance(periods_worked, bool) or not isinstance(periods_worked, int):
        return ["Periods worked must be a whole number"]

    if pay_cycle is PayCycle.WEEKLY:
        if not 1 <= periods_worked <= 52:
            return ["Weeks worked must be between 1 and 52"]
    elif not 1 <= periods_worked <= 12:
        return ["Months worked must be between 1 and 12"]

    return []


def months_worked(periods_worked: int, cycle: Any) -> Decimal:
    """Express ``periods_worked`` as month-equivalents, capped at a full year."""

    pay_cycle = PayCycle.parse(cycle)
    months = Decimal(periods_worked)
    if pay_cycle is PayCycle.WEEKLY:
        months = months / WEEKS_PER_MONTH
    return min(months, MONTHS_PER_YEAR)


def project_ytd(
    result: ComputationResult,
    periods_worked: int,
    cycle: Any = None,
) -> YTDProjection:
    """Scale a full-year result linearly to the portion of the year worked.

    This assumes constant monthly earnings; it is a projection and does not
    recompute tax for the partial period.
    """

    pay_cycle = PayCycle.parse(cycle if cycle is not None else result.cycle)
    problems = validate_cycle_input(pay_cycle, periods_worked)
    if problems:
        raise ValueError("; ".join(problems))

    months = months_worked(periods_worked, pay_cycle)
    fraction = months / MONTHS_PER_YEAR

    ytd_gross = result.annual_gross * fraction
    ytd_tax = result.annual_tax * fraction

    return YTDProjection(
        cycle=pay_cycle,
        periods_worked=periods_worked,
        months_worked=months,
        fraction_of_year=fraction,
        ytd_gross=ytd_gross,
        ytd_tax=ytd_tax,
        ytd_net=result.annual_net_pay * fraction,
        remaining_months=MONTHS_PER_YEAR - months,
        projected_remaining_gross=result.annual_gross - ytd_gross,
        projected_remaining_tax=result.annual_tax - ytd_tax,
        completion_percentage=fraction * HUNDRED,
    )


def cycle_figures(
    cycle: PayCycle,
    *,
    monthly_gross: Decimal,
    monthly_deductions: Decimal,
    monthly_tax: Decimal,
    monthly_net: Decimal,
) -> CycleFigures:
    """Express monthly figures in ``cycle``."""

    return CycleFigures(
        cycle=cycle,
        gross=_from_monthly(monthly_gross, cycle),
        deductions=_from_monthly(monthly_deductions, cycle),
        tax=_from_monthly(monthly_tax, cycle),
        net=_from_monthly(monthly_net, cycle),
    )


def attach_projection(result: ComputationResult, periods_worked: int) -> ComputationResult:
    return replace(result, ytd=project_ytd(result, periods_worked, result.cycle))


__all__ = [
    "MONTHS_PER_YEAR",
    "WEEKS_PER_MONTH",
    "attach_projection",
    "convert",
    "cycle_figures",
    "months_worked",
    "project_ytd",
    "validate_cycle_input",
]
