"""Pydantic models describing the public API surface."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .engine import (
    AdditionalDeductions,
    EngineInput,
    PayCycle,
    PayrollAdjustments,
    SalaryComponents,
)

__all__ = [
    "AdditionalDeductionsInput",
    "AdjustmentRequest",
    "AdjustmentsInput",
    "BracketEditRequest",
    "BracketRemoveRequest",
    "BracketScheduleRequest",
    "CycleConversionRequest",
    "PayeRequest",
    "SalaryComponentsInput",
    "format_validation_error",
]


class _RequestModel(BaseModel):
    """Request models accept snake_case and camelCase keys alike."""

    model_config = ConfigDict(
        extra="forbid", populate_by_name=True, alias_generator=to_camel
    )


class SalaryComponentsInput(_RequestModel):
    """Monthly (or ``salary_cycle``) salary components."""

    basic: Decimal = Field(default=Decimal("0"), ge=0)
    housing: Decimal = Field(default=Decimal("0"), ge=0)
    transport: Decimal = Field(default=Decimal("0"), ge=0)
    entertainment: Decimal = Field(default=Decimal("0"), ge=0)
    meal_subsidy: Decimal = Field(default=Decimal("0"), ge=0)
    medical: Decimal = Field(default=Decimal("0"), ge=0)
    benefits_in_kind: Decimal = Field(default=Decimal("0"), ge=0)

    def to_domain(self) -> SalaryComponents:
        return SalaryComponents(**self.model_dump())


class AdditionalDeductionsInput(_RequestModel):
    """Voluntary deductions and employer facts."""

    nhis: Decimal = Field(default=Decimal("0"), ge=0)
    life_assurance: Decimal = Field(default=Decimal("0"), ge=0)
    gratuities: Decimal = Field(default=Decimal("0"), ge=0)
    employee_count: int = Field(default=1, ge=1)
    additional_pension: Decimal = Field(default=Decimal("0"), ge=0)
    exempt_from_nhf: bool = False

    def to_domain(self) -> AdditionalDeductions:
        return AdditionalDeductions(**self.model_dump())


def _parse_cycle(value: Any) -> PayCycle:
    if value is None:
        return PayCycle.MONTHLY
    return PayCycle.parse(value)


class PayeRequest(_RequestModel):
    """Payload accepted by the PAYE computation endpoint."""

    year: int | None = Field(default=None, ge=0)
    salary_components: SalaryComponentsInput
    annual_rent_paid: Decimal = Field(default=Decimal("0"), ge=0)
    additional_deductions: AdditionalDeductionsInput = Field(
        default_factory=AdditionalDeductionsInput
    )
    cycle: PayCycle = PayCycle.MONTHLY
    salary_cycle: PayCycle = PayCycle.MONTHLY
    periods_worked: int | None = Field(default=None, ge=1)
    ytd_mode: bool = False

    @field_validator("cycle", "salary_cycle", mode="before")
    @classmethod
    def _normalise_cycle(cls, value: Any) -> PayCycle:
        return _parse_cycle(value)

    @model_validator(mode="after")
    def _check_periods(self) -> "PayeRequest":
        if self.periods_worked is None:
            return self

        from naijapaye.backend.app.services.calculators.cycles import validate_cycle_input

        problems = validate_cycle_input(self.cycle, self.periods_worked)
        if problems:
            raise ValueError("; ".join(problems))
        return self

    def to_engine_input(self) -> EngineInput:
        return EngineInput(
            salary_components=self.salary_components.to_domain(),
            annual_rent_paid=self.annual_rent_paid,
            additional_deductions=self.additional_deductions.to_domain(),
            cycle=self.cycle,
            salary_cycle=self.salary_cycle,
            periods_worked=self.periods_worked,
            ytd_mode=self.ytd_mode,
        )


class AdjustmentsInput(_RequestModel):
    """Monthly payroll adjustments."""

    bonus: Decimal = Field(default=Decimal("0"), ge=0)
    overtime: Decimal = Field(default=Decimal("0"), ge=0)
    commission: Decimal = Field(default=Decimal("0"), ge=0)
    loan_deduction: Decimal = Field(default=Decimal("0"), ge=0)
    other_deductions: Decimal = Field(default=Decimal("0"), ge=0)

    def to_domain(self) -> PayrollAdjustments:
        return PayrollAdjustments(**self.model_dump())


class AdjustmentRequest(PayeRequest):
    adjustments: AdjustmentsInput = Field(default_factory=AdjustmentsInput)


class CycleConversionRequest(_RequestModel):
    amount: Decimal
    from_cycle: PayCycle
    to_cycle: PayCycle

    @field_validator("from_cycle", "to_cycle", mode="before")
    @classmethod
    def _normalise_cycle(cls, value: Any) -> PayCycle:
        return _parse_cycle(value)


class BracketScheduleRequest(_RequestModel):
    """A bracket schedule, or the configured one for ``year`` when omitted.

    Bracket entries stay as raw mappings so that invalid entries come back as
    structured bracket issues instead of request validation errors.
    """

    year: int | None = Field(default=None, ge=0)
    brackets: list[dict[str, Any]] | None = None


class BracketEditRequest(BracketScheduleRequest):
    index: int
    field: str
    value: Any = None


class BracketRemoveRequest(BracketScheduleRequest):
    index: int


def format_validation_error(error: ValidationError, subject: str = "calculation") -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid {subject} payload: {details}"
