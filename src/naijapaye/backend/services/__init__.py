"""Service-layer helpers for the naijapaye backend."""

from naijapaye.backend.app.services.calculation_service import (
    compute_adjusted_payload,
    compute_paye,
    compute_paye_payload,
    convert_cycle_payload,
)

from .request_parser import parse_json_payload
from .response_builder import build_json_response

__all__ = [
    "build_json_response",
    "compute_adjusted_payload",
    "compute_paye",
    "compute_paye_payload",
    "convert_cycle_payload",
    "parse_json_payload",
]
