"""Service layer for participant comments."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from giveaway.errors import ValidationError
from giveaway.models.comment import Comment
from giveaway.repositories.comment_repository import CommentRepository
from giveaway.services.participation_service import ParticipationService

MAX_COMMENT_LENGTH = 2000


class CommentService:
    """Host notes on participants. Only the drawing owner can read or write them."""

    def __init__(
        self,
        participants: ParticipationService | None = None,
        repository: CommentRepository | None = None,
    ) -> None:
        self._participants = participants or ParticipationService()
        self._repo = repository or CommentRepository()

    def list_comments(self, session: Session, participant_id: int, owner_id: str) -> Sequence[Comment]:
        participant = self._participants.get_owned_participant(session, participant_id, owner_id)
        return self._repo.list_for_participant(session, participant.id)

    def add_comment(self, session: Session, participant_id: int, owner_id: str, text: str) -> Comment:
        text = (text or "").strip()
        if not text:
            raise ValidationError(message="Comment text is required", details={"comment": ["Must not be blank"]})
        if len(text) > MAX_COMMENT_LENGTH:
            raise ValidationError(
                message="Comment too long",
                details={"comment": [f"At most {MAX_COMMENT_LENGTH} characters"]},
            )

        participant = self._participants.get_owned_participant(session, participant_id, owner_id)
        return self._repo.create(session, participant.id, text)
