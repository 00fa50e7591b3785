"""Domain types exchanged between the PAYE calculators.

Inputs are plain frozen dataclasses so that the calculators can enforce their
own contracts (and report every offending field at once) instead of relying on
request-level validation. Results are frozen as well; a result is derived from
exactly one input tuple and is never mutated after it is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterator

ZERO = Decimal("0")


class SalaryInputError(ValueError):
    """Raised when salary inputs break the calculator contract."""

    def __init__(self, problems: dict[str, str]):
        self.problems = dict(problems)
        details = "; ".join(f"{name}: {message}" for name, message in self.problems.items())
        super().__init__(f"Invalid salary input: {details}")


def as_decimal(value: Any, name: str) -> Decimal:
    """Convert numeric input into :class:`Decimal` without judging its sign.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")``. Non-finite
    values are kept so the calculators can reject them with context.
    """

    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise SalaryInputError({name: "must be a number"})
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except InvalidOperation as exc:
            raise SalaryInputError({name: "must be a number"}) from exc
    raise SalaryInputError({name: "must be a number"})


class PayCycle(str, Enum):
    """Supported payroll cycles."""

    MONTHLY = "monthly"
    WEEKLY = "weekly"
    ANNUAL = "annual"

    @property
    def full_cycle_length(self) -> int:
        """Periods that make up a complete year for this cycle."""

        if self is PayCycle.WEEKLY:
            return 52
        return 12

    @classmethod
    def parse(cls, value: Any) -> PayCycle:
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        try:
            return cls(text)
        except ValueError as exc:
            allowed = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown pay cycle '{value}' (expected one of {allowed})") from exc


class _DecimalFields:
    """Mixin coercing every declared money field to :class:`Decimal`."""

    _money_fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in self._money_fields:
            object.__setattr__(self, name, as_decimal(getattr(self, name), name))


@dataclass(frozen=True)
class SalaryComponents(_DecimalFields):
    """Salary components for one pay period."""

    basic: Decimal = ZERO
    housing: Decimal = ZERO
    transport: Decimal = ZERO
    entertainment: Decimal = ZERO
    meal_subsidy: Decimal = ZERO
    medical: Decimal = ZERO
    benefits_in_kind: Decimal = ZERO

    _money_fields = (
        "basic",
        "housing",
        "transport",
        "entertainment",
        "meal_subsidy",
        "medical",
        "benefits_in_kind",
    )

    def items(self) -> Iterator[tuple[str, Decimal]]:
        for entry in fields(self):
            yield entry.name, getattr(self, entry.name)

    @property
    def gross(self) -> Decimal:
        return sum((value for _, value in self.items()), ZERO)

    @property
    def pensionable(self) -> Decimal:
        return self.basic + self.housing + self.transport


@dataclass(frozen=True)
class AdditionalDeductions(_DecimalFields):
    """Flat monthly deductions and employer facts supplied by the caller."""

    nhis: Decimal = ZERO
    life_assurance: Decimal = ZERO
    gratuities: Decimal = ZERO
    employee_count: int = 1
    additional_pension: Decimal = ZERO
    exempt_from_nhf: bool = False

    _money_fields = ("nhis", "life_assurance", "gratuities", "additional_pension")


@dataclass(frozen=True)
class EngineInput:
    """Everything a single PAYE computation depends on."""

    salary_components: SalaryComponents
    annual_rent_paid: Decimal = ZERO
    additional_deductions: AdditionalDeductions = field(default_factory=AdditionalDeductions)
    cycle: PayCycle = PayCycle.MONTHLY
    salary_cycle: PayCycle = PayCycle.MONTHLY
    periods_worked: int | None = None
    ytd_mode: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "annual_rent_paid", as_decimal(self.annual_rent_paid, "annual_rent_paid"))
        object.__setattr__(self, "cycle", PayCycle.parse(self.cycle))
        object.__setattr__(self, "salary_cycle", PayCycle.parse(self.salary_cycle))


@dataclass(frozen=True)
class BracketTax:
    """Income allocated to one bracket and the tax it attracts."""

    label: str
    description: str
    lower: Decimal
    upper: Decimal | None
    rate: Decimal
    taxable_amount: Decimal
    tax: Decimal


@dataclass(frozen=True)
class TaxComputation:
    total_tax: Decimal
    breakdown: tuple[BracketTax, ...] = ()


@dataclass(frozen=True)
class DeductionBreakdown:
    """Monthly statutory deductions split into employee and employer sides."""

    gross_emolument: Decimal
    pensionable_emoluments: Decimal
    employee_pension: Decimal
    additional_pension: Decimal
    nhf: Decimal
    nhis: Decimal
    life_assurance: Decimal
    gratuities: Decimal
    employer_pension: Decimal
    nsitf: Decimal
    itf: Decimal
    itf_applicable: bool
    nhf_exempt: bool
    total_employee_deductions: Decimal
    total_employer_contributions: Decimal

    @property
    def total_pension(self) -> Decimal:
        return self.employee_pension + self.additional_pension


@dataclass(frozen=True)
class AnnualDeductions:
    """Annual amounts considered when reducing taxable income."""

    rent_relief: Decimal
    pension: Decimal
    nhf: Decimal
    nhis: Decimal
    life_assurance: Decimal
    gratuities: Decimal
    voluntary_included: bool
    total: Decimal


@dataclass(frozen=True)
class CycleFigures:
    """Gross, deductions, tax and net pay expressed in one pay cycle."""

    cycle: PayCycle
    gross: Decimal
    deductions: Decimal
    tax: Decimal
    net: Decimal


@dataclass(frozen=True)
class EmployerCost:
    monthly: Decimal
    annual: Decimal


@dataclass(frozen=True)
class YTDProjection:
    """Linear year-to-date projection derived from a full-year result."""

    cycle: PayCycle
    periods_worked: int
    months_worked: Decimal
    fraction_of_year: Decimal
    ytd_gross: Decimal
    ytd_tax: Decimal
    ytd_net: Decimal
    remaining_months: Decimal
    projected_remaining_gross: Decimal
    projected_remaining_tax: Decimal
    completion_percentage: Decimal


@dataclass(frozen=True)
class ComputationResult:
    """Complete, internally consistent PAYE result for one employee."""

    tax_year: int
    cycle: PayCycle
    monthly_gross: Decimal
    annual_gross: Decimal
    deductions: DeductionBreakdown
    rent_relief: Decimal
    annual_deductions: AnnualDeductions
    annual_taxable_income: Decimal
    tax: TaxComputation
    monthly_tax: Decimal
    net_pay: Decimal
    effective_tax_rate: Decimal
    per_cycle: CycleFigures
    employer_cost: EmployerCost
    settings_fallback: bool = False
    ytd: YTDProjection | None = None

    @property
    def annual_tax(self) -> Decimal:
        return self.tax.total_tax

    @property
    def annual_net_pay(self) -> Decimal:
        return self.net_pay * 12


@dataclass(frozen=True)
class PayrollAdjustments(_DecimalFields):
    """One-off monthly additions and deductions applied on top of a result."""

    bonus: Decimal = ZERO
    overtime: Decimal = ZERO
    commission: Decimal = ZERO
    loan_deduction: Decimal = ZERO
    other_deductions: Decimal = ZERO

    _money_fields = ("bonus", "overtime", "commission", "loan_deduction", "other_deductions")

    @property
    def total_additions(self) -> Decimal:
        return self.bonus + self.overtime + self.commission


@dataclass(frozen=True)
class AdjustedComputation:
    """A base result with payroll adjustments applied."""

    base: ComputationResult
    adjustments: PayrollAdjustments
    adjusted_gross: Decimal
    gross_factor: Decimal
    adjusted_pension: Decimal
    adjusted_nhf: Decimal
    monthly_tax: Decimal
    loan_deduction: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    original_net_pay: Decimal
    net_pay_change: Decimal
    total_adjustments: Decimal


__all__ = [
    "AdditionalDeductions",
    "AdjustedComputation",
    "AnnualDeductions",
    "BracketTax",
    "ComputationResult",
    "CycleFigures",
    "DeductionBreakdown",
    "EmployerCost",
    "EngineInput",
    "PayCycle",
    "PayrollAdjustments",
    "SalaryComponents",
    "SalaryInputError",
    "TaxComputation",
    "YTDProjection",
    "ZERO",
    "as_decimal",
]
