"""Typed request models and engine domain types.

Requests arrive as Pydantic models that normalise JSON input (either
``snake_case`` or ``camelCase`` keys) and convert into the frozen dataclasses
in :mod:`.engine`. The calculators only ever see the dataclasses, which keeps
the engine free of any HTTP or serialisation concerns.
"""

from __future__ import annotations

from .api import (
    AdditionalDeductionsInput,
    AdjustmentRequest,
    AdjustmentsInput,
    BracketEditRequest,
    BracketRemoveRequest,
    BracketScheduleRequest,
    CycleConversionRequest,
    PayeRequest,
    SalaryComponentsInput,
    format_validation_error,
)
from .engine import (
    AdditionalDeductions,
    AdjustedComputation,
    AnnualDeductions,
    BracketTax,
    ComputationResult,
    CycleFigures,
    DeductionBreakdown,
    EmployerCost,
    EngineInput,
    PayCycle,
    PayrollAdjustments,
    SalaryComponents,
    SalaryInputError,
    TaxComputation,
    YTDProjection,
)

__all__ = [
    "AdditionalDeductions",
    "AdditionalDeductionsInput",
    "AdjustedComputation",
    "AdjustmentRequest",
    "AdjustmentsInput",
    "AnnualDeductions",
    "BracketEditRequest",
    "BracketRemoveRequest",
    "BracketScheduleRequest",
    "BracketTax",
    "ComputationResult",
    "CycleConversionRequest",
    "CycleFigures",
    "DeductionBreakdown",
    "EmployerCost",
    "EngineInput",
    "PayCycle",
    "PayeRequest",
    "PayrollAdjustments",
    "SalaryComponents",
    "SalaryComponentsInput",
    "SalaryInputError",
    "TaxComputation",
    "YTDProjection",
    "format_validation_error",
]
