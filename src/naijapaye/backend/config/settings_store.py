"""YAML-backed settings store with documented fallbacks."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    DEFAULT_TAX_YEAR,
    ConfigurationError,
    PayeSettings,
    TaxYearManifest,
    TaxYearManifestEntry,
)

_LOGGER = logging.getLogger(__name__)

CONFIG_DIRECTORY = Path(
    os.getenv("NAIJAPAYE_CONFIG_DIR") or Path(__file__).resolve().parent / "data"
)
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"

FALLBACK_SOURCE = "defaults"


@dataclass(frozen=True)
class SettingsSnapshot:
    """Immutable settings handed to a single computation."""

    settings: PayeSettings
    source: str
    is_fallback: bool = False


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> TaxYearManifest:
    """Load and cache the configuration manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        return TaxYearManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


def manifest_entries() -> Sequence[TaxYearManifestEntry]:
    """Expose the configured manifest entries."""

    return load_manifest().years


def settings_path(year: int) -> Path:
    try:
        manifest_entry = load_manifest().get_entry(year)
    except KeyError as exc:
        raise FileNotFoundError(f"Settings for year {year} not declared in manifest") from exc
    return CONFIG_DIRECTORY / manifest_entry.resolved_filename


@lru_cache(maxsize=8)
def load_settings(year: int) -> PayeSettings:
    """Load settings for the specified tax year from disk."""

    config_file = settings_path(year)
    if not config_file.exists():
        raise FileNotFoundError(f"Settings file for year {year} missing: {config_file.name}")

    raw_config = _load_yaml(config_file)
    if not {"year", "tax_year", "taxYear"} & raw_config.keys():
        raw_config["year"] = year

    try:
        settings = PayeSettings.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Settings validation failed for {year}: {error}") from error

    if settings.tax_year != year:
        raise ConfigurationError(
            f"Settings year mismatch: expected {year}, found {settings.tax_year}"
        )

    return settings


@lru_cache(maxsize=1)
def default_settings() -> PayeSettings:
    """Return the documented statutory defaults."""

    return PayeSettings()


def available_years() -> Sequence[int]:
    """Return the tax years declared in the manifest."""

    return load_manifest().supported_years


def default_year() -> int:
    try:
        years = available_years()
    except (OSError, yaml.YAMLError):
        return DEFAULT_TAX_YEAR
    return years[-1] if years else DEFAULT_TAX_YEAR


def resolve_settings(year: int | None = None) -> SettingsSnapshot:
    """Return settings for ``year``, substituting defaults when the store is down.

    Missing or unreadable files yield the documented defaults flagged with
    ``is_fallback`` so callers can warn users. Files that load but fail
    validation raise :class:`ConfigurationError` instead of being masked.
    """

    target_year = default_year() if year is None else year
    try:
        settings = load_settings(target_year)
    except (OSError, yaml.YAMLError) as exc:
        _LOGGER.warning(
            "Settings for %s unavailable (%s); using documented defaults", target_year, exc
        )
        return SettingsSnapshot(
            settings=default_settings(), source=FALLBACK_SOURCE, is_fallback=True
        )

    return SettingsSnapshot(settings=settings, source=str(settings_path(target_year).name))


def clear_caches() -> None:
    load_manifest.cache_clear()
    load_settings.cache_clear()


__all__ = [
    "CONFIG_DIRECTORY",
    "FALLBACK_SOURCE",
    "MANIFEST_FILE",
    "SettingsSnapshot",
    "available_years",
    "clear_caches",
    "default_settings",
    "default_year",
    "load_manifest",
    "load_settings",
    "manifest_entries",
    "resolve_settings",
    "settings_path",
]
