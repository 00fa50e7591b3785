"""Integration coverage for the bracket editor endpoints."""

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient

SCHEDULE = [
    {"min": 0, "max": 800000, "rate": 0, "description": "Tax Free Threshold"},
    {"min": 800000, "max": 3000000, "rate": 0.15, "description": "Lower band"},
    {"min": 3000000, "max": None, "rate": 0.18, "description": "Top"},
]


def test_validate_configured_schedule(client: FlaskClient) -> None:
    response = client.post("/api/v1/config/brackets/validate", json={"year": 2026})

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["ok"] is True
    assert len(payload["brackets"]) == 6
    assert payload["errors"] == []


def test_validate_reports_gaps_with_422(client: FlaskClient) -> None:
    broken = [dict(SCHEDULE[0]), {**SCHEDULE[2], "min": 900000}]

    response = client.post("/api/v1/config/brackets/validate", json={"brackets": broken})

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    payload = response.get_json()
    assert payload["ok"] is False
    assert payload["errors"][0] == {
        "index": 1,
        "field": "min",
        "message": "Gap between 800000 and 900000",
    }


def test_edit_moves_neighbouring_boundary(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/config/brackets/edit",
        json={"brackets": SCHEDULE, "index": 1, "field": "max", "value": 2500000},
    )

    assert response.status_code == HTTPStatus.OK
    brackets = response.get_json()["brackets"]
    assert brackets[1]["max"] == 2500000
    assert brackets[2]["min"] == 2500000


def test_rejected_edit_returns_original_schedule(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/config/brackets/edit",
        json={"brackets": SCHEDULE, "index": 1, "field": "rate", "value": 1.5},
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    payload = response.get_json()
    assert payload["errors"][0]["field"] == "rate"
    assert [bracket["rate"] for bracket in payload["brackets"]] == [0.0, 0.15, 0.18]


def test_edit_warns_about_falling_rate(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/config/brackets/edit",
        json={"brackets": SCHEDULE, "index": 2, "field": "rate", "value": 0.1},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["ok"] is True
    assert payload["warnings"][0]["index"] == 2


def test_add_bracket_endpoint(client: FlaskClient) -> None:
    response = client.post("/api/v1/config/brackets/add", json={"brackets": SCHEDULE})

    assert response.status_code == HTTPStatus.OK
    brackets = response.get_json()["brackets"]
    assert len(brackets) == 4
    assert brackets[2] == {
        "min": 3000000.0,
        "max": 4000000.0,
        "rate": pytest.approx(0.16),
        "description": "Additional Bracket 3",
    }
    assert brackets[3]["min"] == 4000000


def test_remove_bracket_endpoint(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/config/brackets/remove", json={"brackets": SCHEDULE, "index": 2}
    )

    assert response.status_code == HTTPStatus.OK
    brackets = response.get_json()["brackets"]
    assert len(brackets) == 2
    assert brackets[-1]["max"] is None
    assert brackets[-1]["description"] == "Top Bracket"


def test_remove_refuses_to_shrink_below_two(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/config/brackets/remove",
        json={"brackets": SCHEDULE[:1] + [{**SCHEDULE[2], "min": 800000}], "index": 0},
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_malformed_bracket_request(client: FlaskClient) -> None:
    response = client.post("/api/v1/config/brackets/edit", json={"brackets": SCHEDULE})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert payload["message"].startswith("Invalid bracket payload")
