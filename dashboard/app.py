"""Flask application factory for the billing review portal."""

import logging
import os

from flask import Flask

from dashboard.routes import billing_review_bp

logger = logging.getLogger(__name__)


def create_app(config: dict | None = None) -> Flask:
    """Create the portal app.

    Args:
        config: Optional overrides, e.g. FINALIZATION_DB_PATH

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    app.config.from_mapping(
        FINALIZATION_DB_PATH=os.environ.get("DOSIMETRY_DB_PATH"),
    )
    if config:
        app.config.update(config)

    app.register_blueprint(billing_review_bp)

    logger.info(f"Billing portal using store: {app.config.get('FINALIZATION_DB_PATH') or 'default path'}")
    return app
