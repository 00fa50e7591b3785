"""WSGI entrypoint for deploying the naijapaye backend behind Passenger."""

from naijapaye.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
