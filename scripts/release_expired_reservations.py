"""Run one expiry sweep: return lapsed number reservations to the available pool.

For deployments that disable the in-process scheduler (SCHEDULER_ENABLED=false)
and sweep from cron instead.

Usage:
  python scripts/release_expired_reservations.py [--drawing DRAWING_ID]
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys

from dotenv import load_dotenv
from sqlalchemy.orm import sessionmaker

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from giveaway.config import resolve_database_url
from giveaway.db import create_app_engine, session_scope
from giveaway.services.number_slot_service import NumberSlotService


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--drawing", default=None, help="Only sweep this drawing")
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    engine = create_app_engine(resolve_database_url())
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    with session_scope(factory) as session:
        released = NumberSlotService().release_expired(session, drawing_id=args.drawing)

    print(f"Released {released} expired reservation(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
