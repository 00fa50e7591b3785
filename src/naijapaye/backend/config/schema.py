"""Pydantic models describing the PAYE settings schema."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

MAX_RATE = Decimal("1")
_UNBOUNDED_MARKERS = {"inf", "+inf", "infinity", "+infinity", "unbounded", ""}


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class BracketScheduleError(ConfigurationError):
    """Raised when a bracket schedule breaks its structural invariants."""

    def __init__(self, issues: Sequence[str]):
        self.issues = tuple(issues)
        super().__init__("Invalid tax bracket schedule: " + "; ".join(self.issues))


def coerce_decimal(value: Any, label: str) -> Decimal:
    """Convert ``value`` into a finite :class:`~decimal.Decimal`."""

    if isinstance(value, bool):
        raise ConfigurationError(f"{label} must be numeric, not a boolean")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation as exc:
            raise ConfigurationError(f"{label} must be numeric") from exc
    else:
        raise ConfigurationError(f"{label} must be numeric")

    if not result.is_finite():
        raise ConfigurationError(f"{label} must be a finite number")
    return result


def coerce_upper_bound(value: Any) -> Decimal | None:
    """Normalise the different spellings of an open upper bound to ``None``."""

    if value is None:
        return None
    if isinstance(value, float) and value == float("inf"):
        return None
    if isinstance(value, str) and value.strip().lower() in _UNBOUNDED_MARKERS:
        return None
    if isinstance(value, Decimal) and value.is_infinite() and value > 0:
        return None
    return coerce_decimal(value, "Bracket maximum")


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBracket(ImmutableModel):
    """A single progressive band covering ``[lower_bound, upper_bound)``."""

    lower_bound: Decimal = Field(alias="min")
    upper_bound: Decimal | None = Field(default=None, alias="max")
    rate: Decimal
    description: str = ""

    @field_validator("lower_bound", mode="before")
    @classmethod
    def _coerce_lower(cls, value: Any) -> Decimal:
        return coerce_decimal(value, "Bracket minimum")

    @field_validator("upper_bound", mode="before")
    @classmethod
    def _coerce_upper(cls, value: Any) -> Decimal | None:
        return coerce_upper_bound(value)

    @field_validator("rate", mode="before")
    @classmethod
    def _coerce_rate(cls, value: Any) -> Decimal:
        return coerce_decimal(value, "Bracket rate")

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.lower_bound < 0:
            raise ConfigurationError("Bracket minimum must be non-negative")
        if self.rate < 0 or self.rate > MAX_RATE:
            raise ConfigurationError("Tax rates must be between 0 and 1")
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ConfigurationError("Bracket maximum must exceed its minimum")
        return self

    @property
    def is_unbounded(self) -> bool:
        return self.upper_bound is None

    @property
    def width(self) -> Decimal | None:
        if self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound


class StatutoryRates(ImmutableModel):
    """Contribution and levy rates expressed as ratios."""

    employee_pension: Decimal = Field(default=Decimal("0.08"), alias="employeePension")
    employer_pension: Decimal = Field(default=Decimal("0.10"), alias="employerPension")
    nhf: Decimal = Decimal("0.025")
    nhis: Decimal = Decimal("0.05")
    nsitf: Decimal = Decimal("0.01")
    itf: Decimal = Decimal("0.01")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_rates(cls, value: Any) -> Decimal:
        return coerce_decimal(value, "Statutory rate")

    @model_validator(mode="after")
    def _validate_rates(self) -> StatutoryRates:
        for name, value in self:
            if value < 0 or value > MAX_RATE:
                raise ConfigurationError(f"Statutory rate '{name}' must be between 0 and 1")
        return self


class Reliefs(ImmutableModel):
    """Relief rules reducing taxable income."""

    rent_relief: Decimal = Field(default=Decimal("0.20"), alias="rentRelief")
    rent_relief_cap: Decimal = Field(default=Decimal("500000"), alias="rentReliefCap")
    deduct_voluntary_contributions: bool = Field(
        default=False, alias="deductVoluntaryContributions"
    )

    @field_validator("rent_relief", "rent_relief_cap", mode="before")
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Decimal:
        return coerce_decimal(value, "Relief value")

    @model_validator(mode="after")
    def _validate_reliefs(self) -> Reliefs:
        if self.rent_relief < 0 or self.rent_relief > MAX_RATE:
            raise ConfigurationError("Rent relief rate must be between 0 and 1")
        if self.rent_relief_cap < 0:
            raise ConfigurationError("Rent relief cap must be non-negative")
        return self


DEFAULT_TAX_BRACKETS: tuple[dict[str, Any], ...] = (
    {"min": 0, "max": 800_000, "rate": "0.00", "description": "Tax Free Threshold"},
    {"min": 800_000, "max": 3_000_000, "rate": "0.15", "description": "Next ₦2,200,000 (15%)"},
    {"min": 3_000_000, "max": 12_000_000, "rate": "0.18", "description": "Next ₦9,000,000 (18%)"},
    {"min": 12_000_000, "max": 25_000_000, "rate": "0.21", "description": "Next ₦13,000,000 (21%)"},
    {"min": 25_000_000, "max": 50_000_000, "rate": "0.23", "description": "Next ₦25,000,000 (23%)"},
    {"min": 50_000_000, "max": None, "rate": "0.25", "description": "Above ₦50,000,000 (25%)"},
)

DEFAULT_TAX_YEAR = 2026


def _default_brackets() -> tuple[TaxBracket, ...]:
    return tuple(TaxBracket.model_validate(entry) for entry in DEFAULT_TAX_BRACKETS)


class PayeSettings(ImmutableModel):
    """Complete settings snapshot consumed by the PAYE engine.

    Every section is optional in the source document; missing values take the
    documented statutory defaults here so downstream calculators never have to
    handle partially populated settings.
    """

    tax_year: int = Field(default=DEFAULT_TAX_YEAR, alias="taxYear")
    effective_date: date | None = Field(default=None, alias="effectiveDate")
    meta: Mapping[str, Any] = Field(default_factory=dict)
    tax_brackets: tuple[TaxBracket, ...] = Field(
        default_factory=_default_brackets, alias="taxBrackets"
    )
    statutory_rates: StatutoryRates = Field(
        default_factory=StatutoryRates, alias="statutoryRates"
    )
    reliefs: Reliefs = Field(default_factory=Reliefs)

    @model_validator(mode="before")
    @classmethod
    def _prepare(cls, data: Any) -> Any:
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise ConfigurationError("Settings must define a mapping at the top level")

        prepared = dict(data)
        if "year" in prepared and "tax_year" not in prepared and "taxYear" not in prepared:
            prepared["tax_year"] = prepared.pop("year")
        for key in ("tax_brackets", "taxBrackets", "statutory_rates", "statutoryRates", "reliefs", "meta"):
            if key in prepared and prepared[key] is None:
                del prepared[key]
        return prepared

    @model_validator(mode="after")
    def _validate_schedule(self) -> Self:
        from .brackets import schedule_issues

        issues = schedule_issues(self.tax_brackets)
        if issues:
            raise BracketScheduleError([issue.message for issue in issues])
        return self


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available settings files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "BracketScheduleError",
    "ConfigurationError",
    "DEFAULT_TAX_BRACKETS",
    "DEFAULT_TAX_YEAR",
    "ImmutableModel",
    "PayeSettings",
    "Reliefs",
    "StatutoryRates",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "coerce_decimal",
    "coerce_upper_bound",
]
