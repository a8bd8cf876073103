"""Shared schema fields."""

from __future__ import annotations

from typing import Any

from marshmallow import fields

from giveaway.utils.clock import isoformat_utc


class UtcDateTime(fields.Field):
    """Dump naive-UTC datetimes as ISO 8601 with a trailing ``Z``."""

    def _serialize(self, value: Any, attr: str | None, obj: Any, **kwargs: Any) -> str | None:
        return isoformat_utc(value)


# Largest value an INTEGER slot number column holds.
MAX_SLOT_NUMBER = 2**31 - 1
