"""Unit tests for JSON request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from naijapaye.backend.services.request_parser import parse_json_payload


def test_parse_payload_uses_year_query_parameter(app: Flask) -> None:
    """The ``year`` query parameter should fill in a missing body field."""

    with app.test_request_context(
        "/api/v1/paye?year=2026",
        method="POST",
        json={"salary_components": {"basic": 100000}},
    ):
        payload = parse_json_payload(request)

    assert payload["year"] == 2026


def test_parse_payload_prefers_body_year(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/paye?year=2030",
        method="POST",
        json={"year": 2026, "salary_components": {"basic": 100000}},
    ):
        payload = parse_json_payload(request)

    assert payload["year"] == 2026


def test_parse_payload_rejects_non_integer_year(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/paye?year=latest",
        method="POST",
        json={"salary_components": {}},
    ):
        with pytest.raises(BadRequest) as excinfo:
            parse_json_payload(request)

    assert "year" in excinfo.value.description


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/paye",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_json_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/paye",
        method="POST",
        data="{not json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest) as excinfo:
            parse_json_payload(request)

    assert excinfo.value.description == "Request body must be valid JSON"
