"""Numbered-slot routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from giveaway.db import get_session
from giveaway.errors import ValidationError
from giveaway.routes.deps import slot_service
from giveaway.schemas.slot import DrawingStatsSchema, ReservationSchema, ReserveRequestSchema, SlotSchema
from giveaway.utils.responses import ok

slots_bp = Blueprint("slots", __name__)

_reserve_schema = ReserveRequestSchema()
_reservation_schema = ReservationSchema()
_slots_schema = SlotSchema(many=True)
_stats_schema = DrawingStatsSchema()

RESERVATION_TOKEN_HEADER = "X-Reservation-Token"


def _parse_numbers(raw: str) -> list[int]:
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if not parts:
        raise ValidationError("Missing numbers parameter", details={"numbers": ["Comma-separated list required"]})
    try:
        return [int(p) for p in parts]
    except ValueError as e:
        raise ValidationError("numbers must be integers", details={"numbers": ["Comma-separated integers"]}) from e


@slots_bp.get("/drawings/<drawing_id>/slots")
def get_slots(drawing_id: str):
    """Slot status for a bounded batch.

    Query params:
    - numbers: comma-separated list, e.g. ``1,2,3``

    Send the ``X-Reservation-Token`` header to see the expiry of your own hold.
    """

    numbers = _parse_numbers(request.args.get("numbers") or "")
    token = request.headers.get(RESERVATION_TOKEN_HEADER) or None

    slots = slot_service().get_slots(get_session(), drawing_id, numbers, reservation_token=token)
    return ok({"drawing_id": drawing_id, "slots": _slots_schema.dump(slots)}, no_store=True)


@slots_bp.get("/drawings/<drawing_id>/stats")
def get_stats(drawing_id: str):
    """Aggregate slot counts. Lapsed holds count as reserved until swept."""

    stats = slot_service().get_stats(get_session(), drawing_id)
    return ok(_stats_schema.dump(stats), no_store=True)


@slots_bp.post("/drawings/<drawing_id>/reserve")
def reserve_number(drawing_id: str):
    """Reserve a number; 409 means pick another one."""

    payload = request.get_json(silent=True) or {}
    data = _reserve_schema.load(payload)

    session = get_session()
    reservation = slot_service().reserve(
        session,
        drawing_id,
        int(data["number"]),
        expiration_minutes=data.get("expiration_minutes"),
    )
    # The hold must be durable before the client is told it has one.
    session.commit()

    return ok(_reservation_schema.dump(reservation), no_store=True)
