"""Flask application package."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from flask import Flask


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    """Application factory.

    Args:
        overrides: config values applied after the environment config
            (tests point DATABASE_URL at a temporary database this way).

    Returns:
        Configured Flask application.
    """
    load_dotenv()

    from giveaway.config import get_config
    from giveaway.db import init_db
    from giveaway.error_handlers import register_error_handlers
    from giveaway.logging_config import configure_logging
    from giveaway.routes.comments import comments_bp
    from giveaway.routes.drawings import drawings_bp
    from giveaway.routes.health import health_bp
    from giveaway.routes.participants import participants_bp
    from giveaway.routes.slots import slots_bp
    from giveaway.routes.winners import winners_bp
    from giveaway.scheduler import start_scheduler

    app = Flask(__name__)
    app.config.from_object(get_config())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)
    init_db(app)
    register_error_handlers(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(drawings_bp, url_prefix="/api")
    app.register_blueprint(slots_bp, url_prefix="/api")
    app.register_blueprint(participants_bp, url_prefix="/api")
    app.register_blueprint(winners_bp, url_prefix="/api")
    app.register_blueprint(comments_bp, url_prefix="/api")

    if app.config.get("SCHEDULER_ENABLED"):
        start_scheduler(app)

    return app
