"""Apply one-off payroll adjustments on top of a computed result."""

from __future__ import annotations

from decimal import Decimal

from naijapaye.backend.app.models.engine import (
    ZERO,
    AdjustedComputation,
    ComputationResult,
    PayrollAdjustments,
    SalaryInputError,
)

from .utils import round_currency

# Loan repayments may not take more than a third of net pay.
MAX_LOAN_DEDUCTION_RATIO = Decimal("0.33")


def _validate(adjustments: PayrollAdjustments) -> None:
    problems: dict[str, str] = {}
    for name in ("bonus", "overtime", "commission", "loan_deduction", "other_deductions"):
        value: Decimal = getattr(adjustments, name)
        if not value.is_finite():
            problems[name] = "must be a finite number"
        elif value < 0:
            problems[name] = "cannot be negative"
    if problems:
        raise SalaryInputError(problems)


def apply_adjustments(
    result: ComputationResult, adjustments: PayrollAdjustments
) -> AdjustedComputation:
    """Add bonuses, overtime and commission and subtract loans and other deductions.

    Pension and NHF scale with the ratio of adjusted to base gross pay while
    the monthly tax is carried over from the base computation unchanged.
    """

    _validate(adjustments)

    base_gross = result.monthly_gross
    adjusted_gross = base_gross + adjustments.total_additions
    factor = adjusted_gross / base_gross if base_gross > 0 else Decimal("1")

    deductions = result.deductions
    adjusted_pension = deductions.employee_pension * factor
    adjusted_nhf = deductions.nhf * factor

    loan_cap = result.net_pay * MAX_LOAN_DEDUCTION_RATIO
    loan_deduction = min(adjustments.loan_deduction, loan_cap)

    statutory = (
        adjusted_pension
        + deductions.additional_pension
        + adjusted_nhf
        + deductions.nhis
        + deductions.life_assurance
        + deductions.gratuities
    )
    total_deductions = (
        statutory + result.monthly_tax + loan_deduction + adjustments.other_deductions
    )
    net_pay = round_currency(max(ZERO, adjusted_gross - total_deductions))

    return AdjustedComputation(
        base=result,
        adjustments=adjustments,
        adjusted_gross=adjusted_gross,
        gross_factor=factor,
        adjusted_pension=adjusted_pension,
        adjusted_nhf=adjusted_nhf,
        monthly_tax=result.monthly_tax,
        loan_deduction=loan_deduction,
        total_deductions=total_deductions,
        net_pay=net_pay,
        original_net_pay=result.net_pay,
        net_pay_change=net_pay - result.net_pay,
        total_adjustments=(
            adjustments.total_additions - loan_deduction - adjustments.other_deductions
        ),
    )


__all__ = ["MAX_LOAN_DEDUCTION_RATIO", "apply_adjustments"]
