"""Winner selection routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from giveaway.db import get_session
from giveaway.routes.deps import current_user_id, winner_service
from giveaway.schemas.winner import SelectWinnersRequestSchema, WinnersSchema
from giveaway.utils.responses import ok

winners_bp = Blueprint("winners", __name__)

_request_schema = SelectWinnersRequestSchema()
_winners_schema = WinnersSchema()


@winners_bp.post("/drawings/<drawing_id>/select-winners")
def select_winners(drawing_id: str):
    """Owner-only; the drawing must have ended. Re-running replaces previous winners."""

    owner_id = current_user_id()
    payload = request.get_json(silent=True) or {}
    data = _request_schema.load(payload)

    session = get_session()
    result = winner_service().select_winners(session, drawing_id, owner_id, winner_numbers=data.get("winner_numbers"))
    session.commit()

    return ok(_winners_schema.dump(result))


@winners_bp.get("/drawings/<drawing_id>/select-winners")
def get_winners(drawing_id: str):
    """Public list of winners (empty until selection has run)."""

    result = winner_service().get_winners(get_session(), drawing_id)
    return ok(_winners_schema.dump(result))
