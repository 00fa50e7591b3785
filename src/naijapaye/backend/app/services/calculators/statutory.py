"""Statutory deductions for employees and employers."""

from __future__ import annotations

from decimal import Decimal

from naijapaye.backend.app.models.engine import (
    ZERO,
    AdditionalDeductions,
    DeductionBreakdown,
    SalaryComponents,
    SalaryInputError,
)
from naijapaye.backend.config.schema import StatutoryRates

MAX_COMPONENT_VALUE = Decimal("100000000")
ITF_MINIMUM_EMPLOYEES = 5


def _check_amount(name: str, value: Decimal, problems: dict[str, str], *, cap: bool) -> None:
    if not value.is_finite():
        problems[name] = "must be a finite number"
    elif value < 0:
        problems[name] = "cannot be negative"
    elif cap and value > MAX_COMPONENT_VALUE:
        problems[name] = f"exceeds the maximum of {MAX_COMPONENT_VALUE:,}"


def validate_salary_components(salary: SalaryComponents, *, enforce_cap: bool = True) -> None:
    """Raise :class:`SalaryInputError` listing every invalid component."""

    problems: dict[str, str] = {}
    for name, value in salary.items():
        _check_amount(name, value, problems, cap=enforce_cap)
    if problems:
        raise SalaryInputError(problems)


def validate_additional_deductions(extra: AdditionalDeductions) -> None:
    problems: dict[str, str] = {}
    for name in ("nhis", "life_assurance", "gratuities", "additional_pension"):
        _check_amount(name, getattr(extra, name), problems, cap=False)

    count = extra.employee_count
    if isinstance(count, bool) or not isinstance(count, int):
        problems["employee_count"] = "must be a whole number"
    elif count < 1:
        problems["employee_count"] = "must be at least 1"

    if problems:
        raise SalaryInputError(problems)


def compute_deductions(
    salary: SalaryComponents,
    rates: StatutoryRates,
    extra: AdditionalDeductions | None = None,
) -> DeductionBreakdown:
    """Compute monthly statutory deductions for ``salary``.

    Pension is based on basic, housing and transport only and NHF on basic
    salary alone. ITF is levied only when the employer has at least five
    employees. NHIS, life assurance and gratuities are flat caller inputs.
    """

    extra = extra or AdditionalDeductions()
    validate_salary_components(salary)
    validate_additional_deductions(extra)

    gross = salary.gross
    pensionable = salary.pensionable

    employee_pension = pensionable * rates.employee_pension
    employer_pension = pensionable * rates.employer_pension
    nhf = ZERO if extra.exempt_from_nhf else salary.basic * rates.nhf
    nsitf = gross * rates.nsitf
    itf_applicable = extra.employee_count >= ITF_MINIMUM_EMPLOYEES
    itf = gross * rates.itf if itf_applicable else ZERO

    total_employee = (
        employee_pension
        + extra.additional_pension
        + nhf
        + extra.nhis
        + extra.life_assurance
        + extra.gratuities
    )
    total_employer = employer_pension + nsitf + itf

    return DeductionBreakdown(
        gross_emolument=gross,
        pensionable_emoluments=pensionable,
        employee_pension=employee_pension,
        additional_pension=extra.additional_pension,
        nhf=nhf,
        nhis=extra.nhis,
        life_assurance=extra.life_assurance,
        gratuities=extra.gratuities,
        employer_pension=employer_pension,
        nsitf=nsitf,
        itf=itf,
        itf_applicable=itf_applicable,
        nhf_exempt=extra.exempt_from_nhf,
        total_employee_deductions=total_employee,
        total_employer_contributions=total_employer,
    )


__all__ = [
    "ITF_MINIMUM_EMPLOYEES",
    "MAX_COMPONENT_VALUE",
    "compute_deductions",
    "validate_additional_deductions",
    "validate_salary_components",
]
