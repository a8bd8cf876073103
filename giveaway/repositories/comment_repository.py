"""Repository layer for participant comments."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from giveaway.models.comment import Comment


class CommentRepository:
    def list_for_participant(self, session: Session, participant_id: int) -> Sequence[Comment]:
        stmt = select(Comment).where(Comment.participant_id == participant_id).order_by(Comment.created_at.asc(), Comment.id.asc())
        return list(session.scalars(stmt).all())

    def create(self, session: Session, participant_id: int, text: str) -> Comment:
        comment = Comment(participant_id=participant_id, comment=text)
        session.add(comment)
        session.flush()  # assign PK
        return comment
