"""Helpers for normalising incoming JSON requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest


def _resolve_year(req: Request, payload: dict[str, Any]) -> None:
    """Populate ``year`` from the query string when the body omits it."""

    if payload.get("year") is not None:
        return

    year_param = req.args.get("year")
    if not year_param:
        return

    try:
        payload["year"] = int(year_param)
    except ValueError as exc:
        raise BadRequest("Query parameter 'year' must be an integer") from exc


def parse_json_payload(req: Request) -> dict[str, Any]:
    """Extract and validate a JSON object payload from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    _resolve_year(req, payload)

    return payload
