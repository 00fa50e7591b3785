"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from naijapaye.backend.app import create_app  # noqa: E402
from naijapaye.backend.config.schema import PayeSettings  # noqa: E402
from naijapaye.backend.config.settings_store import clear_caches  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_settings_caches():
    """Keep cached manifests from leaking between tests that patch the store."""

    clear_caches()
    yield
    clear_caches()


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def default_settings() -> PayeSettings:
    return PayeSettings()


@pytest.fixture()
def tax_only_settings() -> PayeSettings:
    """Default brackets with every statutory rate and relief switched off."""

    return PayeSettings(
        statutory_rates={
            "employee_pension": 0,
            "employer_pension": 0,
            "nhf": 0,
            "nhis": 0,
            "nsitf": 0,
            "itf": 0,
        },
        reliefs={"rent_relief": 0, "rent_relief_cap": 0},
    )
