"""Domain-specific calculation helpers."""

from .adjustments import apply_adjustments
from .cycles import (
    attach_projection,
    convert,
    cycle_figures,
    months_worked,
    project_ytd,
    validate_cycle_input,
)
from .progressive import bracket_label, compute_tax
from .reliefs import compute_rent_relief
from .statutory import compute_deductions, validate_salary_components
from .utils import format_percentage, round_currency, round_rate

__all__ = [
    "apply_adjustments",
    "attach_projection",
    "bracket_label",
    "compute_deductions",
    "compute_rent_relief",
    "compute_tax",
    "convert",
    "cycle_figures",
    "format_percentage",
    "months_worked",
    "project_ytd",
    "round_currency",
    "round_rate",
    "validate_cycle_input",
    "validate_salary_components",
]
