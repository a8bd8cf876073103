"""Comment routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from giveaway.db import get_session
from giveaway.routes.deps import comment_service, current_user_id
from giveaway.schemas.comment import CommentCreateSchema, CommentSchema
from giveaway.utils.responses import ok

comments_bp = Blueprint("comments", __name__)

_comment_schema = CommentSchema()
_comments_schema = CommentSchema(many=True)
_create_schema = CommentCreateSchema()


@comments_bp.get("/participants/<int:participant_id>/comments")
def list_comments(participant_id: int):
    owner_id = current_user_id()
    comments = comment_service().list_comments(get_session(), participant_id, owner_id)
    return ok(_comments_schema.dump(comments))


@comments_bp.post("/participants/<int:participant_id>/comments")
def create_comment(participant_id: int):
    owner_id = current_user_id()
    payload = request.get_json(silent=True) or {}
    data = _create_schema.load(payload)

    session = get_session()
    comment = comment_service().add_comment(session, participant_id, owner_id, str(data["comment"]))
    session.commit()

    return ok(_comment_schema.dump(comment), status_code=201)
