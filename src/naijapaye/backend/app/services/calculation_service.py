"""Orchestrate PAYE computations on top of the individual calculators.

``compute_paye`` is the engine entry point: it composes the statutory, relief
and progressive tax calculators over a single settings snapshot and returns an
immutable :class:`ComputationResult`. ``compute_paye_payload`` wraps it for
JSON callers by validating the request model, resolving settings for the
requested year and serialising the result. Profiling hooks mirror the ones
used across the backend so slow stages can be spotted from the logs.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import fields, is_dataclass
from decimal import Decimal
from enum import Enum
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from naijapaye.backend.app.models import (
    AdjustedComputation,
    AdjustmentRequest,
    AnnualDeductions,
    ComputationResult,
    CycleConversionRequest,
    EmployerCost,
    EngineInput,
    PayCycle,
    PayeRequest,
    SalaryComponents,
    format_validation_error,
)
from naijapaye.backend.app.models.engine import ZERO
from naijapaye.backend.config.schema import PayeSettings
from naijapaye.backend.config.settings_store import (
    FALLBACK_SOURCE,
    SettingsSnapshot,
    default_settings,
    resolve_settings,
)

from .calculators import (
    apply_adjustments,
    attach_projection,
    compute_deductions,
    compute_rent_relief,
    compute_tax,
    convert,
    cycle_figures,
    round_currency,
    round_rate,
    validate_cycle_input,
    validate_salary_components,
)

_LOGGER = logging.getLogger(__name__)

MONTHS_PER_YEAR = Decimal("12")
CALLER_SOURCE = "caller"

# Serialised with four decimals instead of kobo precision.
_RATE_FIELDS = frozenset({"rate", "effective_tax_rate", "fraction_of_year", "gross_factor"})


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("NAIJAPAYE_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _snapshot_for(settings: PayeSettings | SettingsSnapshot | None) -> SettingsSnapshot:
    if settings is None:
        return SettingsSnapshot(
            settings=default_settings(), source=FALLBACK_SOURCE, is_fallback=True
        )
    if isinstance(settings, SettingsSnapshot):
        return settings
    return SettingsSnapshot(settings=settings, source=CALLER_SOURCE)


def _monthly_components(engine_input: EngineInput) -> SalaryComponents:
    components = engine_input.salary_components
    if engine_input.salary_cycle is PayCycle.MONTHLY:
        return components
    return SalaryComponents(
        **{
            name: convert(value, engine_input.salary_cycle, PayCycle.MONTHLY)
            for name, value in components.items()
        }
    )


def _wants_projection(engine_input: EngineInput) -> bool:
    if not engine_input.ytd_mode or engine_input.periods_worked is None:
        return False
    return engine_input.periods_worked < engine_input.cycle.full_cycle_length


def compute_paye(
    engine_input: EngineInput,
    settings: PayeSettings | SettingsSnapshot | None = None,
) -> ComputationResult:
    """Compute gross, deductions, tax and net pay for one employee.

    Without ``settings`` the documented defaults are used and the result is
    flagged with ``settings_fallback``; nothing is read from disk. Contract
    violations raise immediately; nothing is clamped or recovered here.
    """

    snapshot = _snapshot_for(settings)
    config = snapshot.settings

    if engine_input.ytd_mode:
        if engine_input.periods_worked is None:
            raise ValueError("Periods worked is required when YTD mode is enabled")
        problems = validate_cycle_input(engine_input.cycle, engine_input.periods_worked)
        if problems:
            raise ValueError("; ".join(problems))

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    validate_salary_components(engine_input.salary_components, enforce_cap=False)

    with _profile_section("gross", timings):
        monthly = _monthly_components(engine_input)
        monthly_gross = monthly.gross
        annual_gross = monthly_gross * MONTHS_PER_YEAR
    _LOGGER.debug("Gross emolument: monthly=%s annual=%s", monthly_gross, annual_gross)

    with _profile_section("statutory", timings):
        deductions = compute_deductions(
            monthly, config.statutory_rates, engine_input.additional_deductions
        )
    _LOGGER.debug(
        "Statutory deductions: employee=%s employer=%s",
        deductions.total_employee_deductions,
        deductions.total_employer_contributions,
    )

    with _profile_section("relief", timings):
        rent_relief = compute_rent_relief(engine_input.annual_rent_paid, config.reliefs)

    include_voluntary = config.reliefs.deduct_voluntary_contributions
    annual_pension = deductions.total_pension * MONTHS_PER_YEAR
    annual_nhf = deductions.nhf * MONTHS_PER_YEAR
    annual_nhis = deductions.nhis * MONTHS_PER_YEAR
    annual_life = deductions.life_assurance * MONTHS_PER_YEAR
    annual_gratuities = deductions.gratuities * MONTHS_PER_YEAR

    total_annual = rent_relief + annual_pension + annual_nhf + annual_nhis
    if include_voluntary:
        total_annual += annual_life + annual_gratuities

    annual_deductions = AnnualDeductions(
        rent_relief=rent_relief,
        pension=annual_pension,
        nhf=annual_nhf,
        nhis=annual_nhis,
        life_assurance=annual_life,
        gratuities=annual_gratuities,
        voluntary_included=include_voluntary,
        total=total_annual,
    )

    taxable_income = max(ZERO, annual_gross - total_annual)
    _LOGGER.debug(
        "Taxable income: %s (annual deductions %s, rent relief %s)",
        taxable_income,
        total_annual,
        rent_relief,
    )

    with _profile_section("tax", timings):
        tax = compute_tax(taxable_income, config.tax_brackets)

    monthly_tax = round_currency(tax.total_tax / MONTHS_PER_YEAR)
    net_pay = round_currency(
        max(ZERO, monthly_gross - deductions.total_employee_deductions - monthly_tax)
    )
    effective_rate = (
        round_rate(tax.total_tax / annual_gross) if annual_gross > 0 else ZERO
    )
    _LOGGER.debug("Tax: annual=%s monthly=%s net=%s", tax.total_tax, monthly_tax, net_pay)

    employer_monthly = monthly_gross + deductions.total_employer_contributions

    result = ComputationResult(
        tax_year=config.tax_year,
        cycle=engine_input.cycle,
        monthly_gross=monthly_gross,
        annual_gross=annual_gross,
        deductions=deductions,
        rent_relief=rent_relief,
        annual_deductions=annual_deductions,
        annual_taxable_income=taxable_income,
        tax=tax,
        monthly_tax=monthly_tax,
        net_pay=net_pay,
        effective_tax_rate=effective_rate,
        per_cycle=cycle_figures(
            engine_input.cycle,
            monthly_gross=monthly_gross,
            monthly_deductions=deductions.total_employee_deductions,
            monthly_tax=monthly_tax,
            monthly_net=net_pay,
        ),
        employer_cost=EmployerCost(
            monthly=employer_monthly, annual=employer_monthly * MONTHS_PER_YEAR
        ),
        settings_fallback=snapshot.is_fallback,
    )

    if _wants_projection(engine_input):
        with _profile_section("ytd", timings):
            result = attach_projection(result, engine_input.periods_worked)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "compute_paye timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    return result


def _to_json(value: Any, key: str | None = None) -> Any:
    """Convert engine dataclasses into JSON-ready structures."""

    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, Decimal):
        if key in _RATE_FIELDS:
            return float(round_rate(value))
        return float(round_currency(value))
    if is_dataclass(value):
        return {entry.name: _to_json(getattr(value, entry.name), entry.name) for entry in fields(value)}
    if isinstance(value, Mapping):
        return {str(name): _to_json(item, str(name)) for name, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item, key) for item in value]
    return value


def serialise_result(result: ComputationResult) -> dict[str, Any]:
    """Return the JSON representation of ``result``."""

    payload = _to_json(result)
    payload["annual_tax"] = _to_json(result.annual_tax)
    payload["annual_net_pay"] = _to_json(result.annual_net_pay)
    payload["deductions"]["total_pension"] = _to_json(result.deductions.total_pension)
    return payload


def serialise_adjusted(adjusted: AdjustedComputation) -> dict[str, Any]:
    payload = _to_json(adjusted)
    payload["base"] = serialise_result(adjusted.base)
    payload["adjustments"]["total_additions"] = _to_json(adjusted.adjustments.total_additions)
    return payload


def _validate_request(model: type[PayeRequest], payload: Any) -> PayeRequest:
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be a mapping")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def compute_paye_payload(payload: Mapping[str, Any] | PayeRequest) -> dict[str, Any]:
    """Validate ``payload``, compute PAYE and return a JSON-ready summary."""

    request_model = _validate_request(PayeRequest, payload)
    snapshot = resolve_settings(request_model.year)
    result = compute_paye(request_model.to_engine_input(), snapshot)

    response = serialise_result(result)
    response["meta"] = {
        "year": result.tax_year,
        "settings_source": snapshot.source,
        "settings_fallback": snapshot.is_fallback,
    }
    return response


def compute_adjusted_payload(payload: Mapping[str, Any] | AdjustmentRequest) -> dict[str, Any]:
    """Compute PAYE and apply payroll adjustments for a JSON payload."""

    request_model = _validate_request(AdjustmentRequest, payload)
    snapshot = resolve_settings(request_model.year)
    result = compute_paye(request_model.to_engine_input(), snapshot)
    adjusted = apply_adjustments(result, request_model.adjustments.to_domain())

    response = serialise_adjusted(adjusted)
    response["meta"] = {
        "year": result.tax_year,
        "settings_source": snapshot.source,
        "settings_fallback": snapshot.is_fallback,
    }
    return response


def convert_cycle_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Convert an amount between pay cycles for a JSON payload."""

    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be a mapping")
    try:
        request_model = CycleConversionRequest.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc, "conversion")) from exc

    converted = convert(request_model.amount, request_model.from_cycle, request_model.to_cycle)
    return {
        "amount": _to_json(request_model.amount),
        "from_cycle": request_model.from_cycle.value,
        "to_cycle": request_model.to_cycle.value,
        "converted": _to_json(converted),
    }


__all__ = [
    "compute_adjusted_payload",
    "compute_paye",
    "compute_paye_payload",
    "convert_cycle_payload",
    "serialise_adjusted",
    "serialise_result",
]
