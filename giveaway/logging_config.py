"""Logging configuration."""

from __future__ import annotations

import logging

from flask import Flask

LOG_FORMAT = "%(asctime)s %(levelname)s [%(process)d] %(name)s %(message)s"


def configure_logging(app: Flask) -> None:
    """Configure plain-text logs for all workers.

    The process id is part of the format: several Gunicorn workers (each with
    its own sweep scheduler) write to the same stream.
    """

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
    )

    # Reduce noisy loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    if app.config.get("TESTING"):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)
