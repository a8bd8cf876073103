"""Drawing routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from giveaway.db import get_session
from giveaway.routes.deps import current_user_id, drawing_service
from giveaway.schemas.drawing import DrawingCreateSchema, DrawingSchema
from giveaway.utils.responses import ok

drawings_bp = Blueprint("drawings", __name__)

_create_schema = DrawingCreateSchema()
_drawing_schema = DrawingSchema()
_drawings_schema = DrawingSchema(many=True)


@drawings_bp.get("/drawings")
def list_drawings():
    """List drawings owned by the current user."""

    owner_id = current_user_id()
    drawings = drawing_service().list_drawings(get_session(), owner_id)
    return ok(_drawings_schema.dump(drawings))


@drawings_bp.post("/drawings")
def create_drawing():
    """Create a drawing; numbered drawings get their slot pool immediately."""

    owner_id = current_user_id()
    payload = request.get_json(silent=True) or {}
    data = _create_schema.load(payload)

    session = get_session()
    drawing = drawing_service().create_drawing(session, owner_id, **data)
    session.commit()

    return ok(_drawing_schema.dump(drawing), status_code=201)


@drawings_bp.get("/drawings/<drawing_id>")
def get_drawing(drawing_id: str):
    """Public drawing detail."""

    drawing = drawing_service().get_drawing(get_session(), drawing_id)
    return ok(_drawing_schema.dump(drawing))
