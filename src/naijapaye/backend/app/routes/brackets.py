"""REST endpoints wrapping the bracket schedule editor.

Each endpoint accepts an explicit ``brackets`` list or falls back to the
configured schedule for ``year``. Rejected edits answer with HTTP 422 and the
structured issues so a settings form can highlight the offending cell.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request
from pydantic import BaseModel, ValidationError

from naijapaye.backend.app.models import (
    BracketEditRequest,
    BracketRemoveRequest,
    BracketScheduleRequest,
    format_validation_error,
)
from naijapaye.backend.config.brackets import (
    BracketEditResult,
    add_bracket,
    remove_bracket,
    validate_and_apply_edit,
    validate_schedule,
)
from naijapaye.backend.config.settings_store import resolve_settings
from naijapaye.backend.services.request_parser import parse_json_payload
from naijapaye.backend.services.response_builder import build_json_response

from .config import serialise_bracket

blueprint = Blueprint("brackets", __name__, url_prefix="/api/v1/config/brackets")


def _parse(model: type[BaseModel]) -> Any:
    payload = parse_json_payload(request)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc, "bracket")) from exc


def _schedule(request_model: BracketScheduleRequest) -> list[Any]:
    if request_model.brackets is not None:
        return request_model.brackets
    return list(resolve_settings(request_model.year).settings.tax_brackets)


def _respond(result: BracketEditResult) -> tuple[Any, int]:
    payload = {
        "ok": result.ok,
        "brackets": [serialise_bracket(bracket) for bracket in result.brackets],
        "errors": [issue.as_dict() for issue in result.errors],
        "warnings": [issue.as_dict() for issue in result.warnings],
    }
    return build_json_response(payload, 200 if result.ok else 422)


@blueprint.post("/validate")
def validate_brackets() -> tuple[Any, int]:
    request_model = _parse(BracketScheduleRequest)
    return _respond(validate_schedule(_schedule(request_model)))


@blueprint.post("/edit")
def edit_bracket() -> tuple[Any, int]:
    """Apply a single field edit to the schedule."""

    request_model: BracketEditRequest = _parse(BracketEditRequest)
    result = validate_and_apply_edit(
        _schedule(request_model),
        request_model.index,
        request_model.field,
        request_model.value,
    )
    return _respond(result)


@blueprint.post("/add")
def append_bracket() -> tuple[Any, int]:
    """Insert a bracket just below the unbounded top bracket."""

    request_model = _parse(BracketScheduleRequest)
    return _respond(add_bracket(_schedule(request_model)))


@blueprint.post("/remove")
def delete_bracket() -> tuple[Any, int]:
    request_model: BracketRemoveRequest = _parse(BracketRemoveRequest)
    return _respond(remove_bracket(_schedule(request_model), request_model.index))
