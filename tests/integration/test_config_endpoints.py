"""Integration coverage for configuration metadata endpoints."""

from http import HTTPStatus
from shutil import copy2

import pytest
import yaml
from flask.testing import FlaskClient

from naijapaye.backend.config import settings_store
from naijapaye.backend.version import get_project_version


def test_meta_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/meta")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload == {
        "version": get_project_version(),
        "supported_years": [2026],
        "default_year": 2026,
        "currency": "NGN",
    }


def test_list_years_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["default_year"] == 2026
    current_year = next(entry for entry in payload["years"] if entry["year"] == 2026)

    assert current_year["source"] == "2026.yaml"
    assert current_year["is_fallback"] is False
    assert current_year["effective_date"] == "2026-01-01"
    assert current_year["meta"]["currency"] == "NGN"
    assert current_year["status"] == "active"
    assert current_year["notes_url"] == "https://www.firs.gov.ng/"

    brackets = current_year["tax_brackets"]
    assert len(brackets) == 6
    assert brackets[0] == {
        "min": 0.0,
        "max": 800000.0,
        "rate": 0.0,
        "description": "Tax Free Threshold",
    }
    assert brackets[-1]["max"] is None
    assert brackets[-1]["rate"] == pytest.approx(0.25)

    rates = current_year["statutory_rates"]
    assert rates["employee_pension"] == pytest.approx(0.08)
    assert rates["employer_pension"] == pytest.approx(0.10)
    assert rates["nhf"] == pytest.approx(0.025)

    reliefs = current_year["reliefs"]
    assert reliefs["rent_relief"] == pytest.approx(0.2)
    assert reliefs["rent_relief_cap"] == 500000
    assert reliefs["deduct_voluntary_contributions"] is False


def test_list_years_endpoint_discovers_new_year(
    client: FlaskClient, tmp_path, monkeypatch: pytest.MonkeyPatch
) -> None:
    original_directory = settings_store.CONFIG_DIRECTORY
    copy2(original_directory / "2026.yaml", tmp_path / "2026.yaml")

    document = yaml.safe_load((original_directory / "2026.yaml").read_text("utf-8"))
    document["year"] = 2030
    document.pop("effective_date")
    (tmp_path / "2030.yaml").write_text(
        yaml.safe_dump(document, sort_keys=False, allow_unicode=True), encoding="utf-8"
    )
    (tmp_path / "manifest.yaml").write_text(
        "years:\n  - year: 2026\n  - year: 2030\n", encoding="utf-8"
    )

    monkeypatch.setattr(settings_store, "CONFIG_DIRECTORY", tmp_path)
    monkeypatch.setattr(settings_store, "MANIFEST_FILE", tmp_path / "manifest.yaml")

    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert {entry["year"] for entry in payload["years"]} == {2026, 2030}
    assert payload["default_year"] == 2030


def test_year_settings_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2026/settings")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["year"] == 2026
    assert payload["is_fallback"] is False


def test_year_settings_endpoint_falls_back_for_unknown_year(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/1999/settings")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["is_fallback"] is True
    assert payload["source"] == "defaults"
    assert len(payload["tax_brackets"]) == 6


@pytest.fixture()
def broken_manifest(tmp_path, monkeypatch: pytest.MonkeyPatch):
    copy2(settings_store.CONFIG_DIRECTORY / "2026.yaml", tmp_path / "2026.yaml")
    manifest_path = tmp_path / "manifest.yaml"
    manifest_path.write_text("years: [\n", encoding="utf-8")

    monkeypatch.setattr(settings_store, "CONFIG_DIRECTORY", tmp_path)
    monkeypatch.setattr(settings_store, "MANIFEST_FILE", manifest_path)
    return manifest_path


@pytest.mark.parametrize("path", ["/health", "/api/v1/config/meta"])
def test_metadata_survives_unparsable_manifest(
    client: FlaskClient, broken_manifest, path: str
) -> None:
    response = client.get(path)

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["supported_years"] == []
    assert payload["default_year"] is None


def test_list_years_is_empty_with_unparsable_manifest(
    client: FlaskClient, broken_manifest
) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["years"] == []


def test_paye_falls_back_with_unparsable_manifest(client: FlaskClient, broken_manifest) -> None:
    response = client.post("/api/v1/paye", json={"salary_components": {"basic": 100000}})

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["meta"]["settings_fallback"] is True
