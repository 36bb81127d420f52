"""Flask blueprints."""

from __future__ import annotations

from flask import Flask


def register_blueprints(app: Flask) -> None:
    """Register all blueprints on the app."""
    from .wifi import wifi_bp

    app.register_blueprint(wifi_bp)
