"""Background expiry sweep.

Every process runs its own BackgroundScheduler. Overlapping sweeps from
several workers are harmless: each lapsed row is released by exactly one
conditional UPDATE, the others match nothing.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from flask import Flask

from giveaway.db import get_session_factory, session_scope
from giveaway.services.number_slot_service import NumberSlotService
from giveaway.utils.clock import utcnow

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "release_expired_reservations"


def run_sweep(app: Flask) -> int:
    """One sweep across all drawings in its own transaction."""

    service = NumberSlotService.from_config(app.config, clock=app.extensions.get("clock", utcnow))
    try:
        with session_scope(get_session_factory(app)) as session:
            released = service.release_expired(session)
    except Exception as e:
        logger.warning("Expiry sweep failed: %s", e, exc_info=True)
        return 0
    if released:
        logger.info("Expiry sweep released %s reservation(s)", released)
    return released


def start_scheduler(app: Flask) -> BackgroundScheduler:
    interval = int(app.config.get("SWEEP_INTERVAL_SECONDS", 60))

    scheduler = BackgroundScheduler(daemon=True)
    scheduler.add_job(
        run_sweep,
        "interval",
        seconds=interval,
        args=[app],
        id=SWEEP_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    app.extensions["scheduler"] = scheduler
    logger.info("Expiry sweep scheduled every %ss", interval)
    return scheduler
