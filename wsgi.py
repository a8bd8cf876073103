"""WSGI entrypoint for Gunicorn.

Usage:
  gunicorn -w 2 -b 0.0.0.0:8000 wsgi:app

Each worker runs its own expiry sweep; see giveaway.scheduler.
"""

from giveaway import create_app

app = create_app()
