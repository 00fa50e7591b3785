"""Expose settings metadata consumed by payroll front-ends.

These endpoints surface the YAML-backed PAYE settings so that UI forms can
render the bracket schedule, statutory rates and relief rules without
duplicating them, and can warn users when the documented defaults are in use.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import fields, is_dataclass
from datetime import date
from decimal import Decimal
from typing import Any

import yaml
from flask import Blueprint, jsonify

from naijapaye.backend.config.schema import PayeSettings, TaxBracket, TaxYearManifestEntry
from naijapaye.backend.config.settings_store import (
    SettingsSnapshot,
    manifest_entries,
    resolve_settings,
)
from naijapaye.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def _declared_entries() -> list[TaxYearManifestEntry]:
    """Return manifest entries by year, or none when the manifest is unreadable."""

    try:
        entries = manifest_entries()
    except (OSError, yaml.YAMLError):
        return []
    return sorted(entries, key=lambda entry: entry.year)


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the settings manifest."""

    supported_years = [entry.year for entry in _declared_entries()]
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
        "currency": "NGN",
    }


def _serialise_model(value: Any) -> Any:
    """Convert dataclasses or Pydantic models into JSON-ready structures."""

    if value is None:
        return None

    if isinstance(value, Decimal):
        return float(value)

    if isinstance(value, date):
        return value.isoformat()

    if hasattr(value, "model_dump"):
        return _serialise_model(value.model_dump(mode="python"))

    if is_dataclass(value):
        return {entry.name: _serialise_model(getattr(value, entry.name)) for entry in fields(value)}

    if isinstance(value, Mapping):
        return {key: _serialise_model(item) for key, item in value.items()}

    if isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray):
        return [_serialise_model(item) for item in value]

    return value


def serialise_bracket(bracket: TaxBracket) -> dict[str, Any]:
    return {
        "min": float(bracket.lower_bound),
        "max": None if bracket.upper_bound is None else float(bracket.upper_bound),
        "rate": float(bracket.rate),
        "description": bracket.description,
    }


def serialise_settings(settings: PayeSettings) -> dict[str, Any]:
    return {
        "year": settings.tax_year,
        "effective_date": _serialise_model(settings.effective_date),
        "meta": _serialise_model(dict(settings.meta)),
        "tax_brackets": [serialise_bracket(bracket) for bracket in settings.tax_brackets],
        "statutory_rates": _serialise_model(settings.statutory_rates),
        "reliefs": _serialise_model(settings.reliefs),
    }


def _serialise_snapshot(snapshot: SettingsSnapshot) -> dict[str, Any]:
    payload = serialise_settings(snapshot.settings)
    payload["source"] = snapshot.source
    payload["is_fallback"] = snapshot.is_fallback
    return payload


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    payload = get_configuration_metadata()
    return jsonify(payload), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return all configured years with their settings."""

    metadata = get_configuration_metadata()
    years = []
    for entry in _declared_entries():
        settings_payload = _serialise_snapshot(resolve_settings(entry.year))
        settings_payload["status"] = entry.status
        settings_payload["notes_url"] = entry.notes_url
        years.append(settings_payload)
    payload = {
        "years": years,
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/settings")
def get_year_settings(year: int) -> tuple[Any, int]:
    """Return settings for ``year``, or the documented defaults when unavailable."""

    return jsonify(_serialise_snapshot(resolve_settings(year))), 200


__all__ = [
    "blueprint",
    "get_configuration_metadata",
    "serialise_bracket",
    "serialise_settings",
]
