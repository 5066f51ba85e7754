"""
Validation API server — Flask app factory.

Exposes the values validator over HTTP so a rendering pipeline can
check a resolved configuration before producing manifests.
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Flask

logger = logging.getLogger(__name__)


def create_app(
    rules_path: Path | None = None,
    ruleset_name: str | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Args:
        rules_path: Rules file applied to every request.
        ruleset_name: Built-in rule set, used when no file is given.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)

    app.config["RULES_PATH"] = str(rules_path) if rules_path else None
    app.config["RULESET_NAME"] = ruleset_name
    app.config["MAX_CONTENT_LENGTH"] = 5 * 1024 * 1024  # values payloads are small

    from src.ui.web.routes_validate import validate_bp

    app.register_blueprint(validate_bp, url_prefix="/api")

    logger.info("Validation API created (rules=%s, ruleset=%s)", rules_path, ruleset_name)
    return app


def run_server(
    app: Flask,
    host: str = "127.0.0.1",
    port: int = 8000,
    debug: bool = False,
) -> None:
    """Run the Flask development server."""
    logger.info("Starting validation API on %s:%d", host, port)
    app.run(host=host, port=port, debug=debug, use_reloader=False)
