"""Participant routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from giveaway.db import get_session
from giveaway.routes.deps import current_user_id, participation_service
from giveaway.schemas.participant import ParticipantSchema, ParticipantStatusSchema, ParticipateRequestSchema
from giveaway.services.participation_service import ParticipantWithNumbers, Selection
from giveaway.utils.responses import ok

participants_bp = Blueprint("participants", __name__)

_participate_schema = ParticipateRequestSchema()
_status_schema = ParticipantStatusSchema()
_participant_schema = ParticipantSchema()
_participants_schema = ParticipantSchema(many=True)


@participants_bp.post("/drawings/<drawing_id>/participate")
def participate(drawing_id: str):
    """Register and confirm reserved numbers in one transaction.

    A 409 means a reservation expired or was lost; nothing was saved.
    """

    payload = request.get_json(silent=True) or {}
    data = _participate_schema.load(payload)

    session = get_session()
    result = participation_service().register(
        session,
        drawing_id,
        name=data["name"],
        phone=data["phone"],
        email=data.get("email"),
        selections=[Selection(number=s["number"], reservation_token=s["reservation_token"]) for s in data["selections"]],
    )
    session.commit()

    return ok(_participant_schema.dump(result), status_code=201)


@participants_bp.get("/drawings/<drawing_id>/participants")
def list_participants(drawing_id: str):
    """Host view of every participant with their numbers."""

    owner_id = current_user_id()
    results = participation_service().list_participants(get_session(), drawing_id, owner_id)
    return ok(_participants_schema.dump(results))


@participants_bp.get("/drawings/<drawing_id>/participants/<int:participant_id>")
def get_participant(drawing_id: str, participant_id: int):
    result = participation_service().get_participant(get_session(), drawing_id, participant_id)
    return ok(_participant_schema.dump(result))


@participants_bp.patch("/participants/<int:participant_id>")
def update_participant_status(participant_id: int):
    """Approve, reset to pending, or reject (final; returns the participant's numbers to the pool)."""

    owner_id = current_user_id()
    payload = request.get_json(silent=True) or {}
    data = _status_schema.load(payload)

    session = get_session()
    service = participation_service()
    participant = service.update_status(session, participant_id, owner_id, data["status"])
    numbers = service.get_participant(session, participant.drawing_id, participant.id).numbers
    session.commit()

    return ok(_participant_schema.dump(ParticipantWithNumbers(participant=participant, numbers=numbers)))
