"""REST endpoints for PAYE computations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from naijapaye.backend.app.services.calculation_service import (
    compute_adjusted_payload,
    compute_paye_payload,
    convert_cycle_payload,
)
from naijapaye.backend.services.request_parser import parse_json_payload
from naijapaye.backend.services.response_builder import build_json_response

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/paye")
def create_paye_computation() -> tuple[Any, int]:
    """Compute PAYE using the submitted JSON payload."""

    payload = parse_json_payload(request)
    return build_json_response(compute_paye_payload(payload))


@blueprint.post("/paye/adjustments")
def create_adjusted_computation() -> tuple[Any, int]:
    """Compute PAYE and apply bonuses, overtime, loans and other adjustments."""

    payload = parse_json_payload(request)
    return build_json_response(compute_adjusted_payload(payload))


@blueprint.post("/cycles/convert")
def convert_between_cycles() -> tuple[Any, int]:
    payload = parse_json_payload(request)
    return build_json_response(convert_cycle_payload(payload))
