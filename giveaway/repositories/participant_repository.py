"""Repository layer for Participant persistence."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from giveaway.models.participant import Participant, ParticipantStatus


class ParticipantRepository:
    def get_by_id(self, session: Session, participant_id: int) -> Participant | None:
        return session.get(Participant, participant_id)

    def get_in_drawing(self, session: Session, drawing_id: str, participant_id: int) -> Participant | None:
        stmt = select(Participant).where(Participant.drawing_id == drawing_id, Participant.id == participant_id)
        return session.scalars(stmt).first()

    def list_for_drawing(self, session: Session, drawing_id: str) -> Sequence[Participant]:
        stmt = select(Participant).where(Participant.drawing_id == drawing_id).order_by(Participant.id.asc())
        return list(session.scalars(stmt).all())

    def list_by_ids(self, session: Session, participant_ids: list[int]) -> dict[int, Participant]:
        if not participant_ids:
            return {}
        stmt = select(Participant).where(Participant.id.in_(participant_ids))
        return {p.id: p for p in session.scalars(stmt).all()}

    def list_approved(self, session: Session, drawing_id: str) -> Sequence[Participant]:
        stmt = (
            select(Participant)
            .where(Participant.drawing_id == drawing_id, Participant.status == ParticipantStatus.APPROVED.value)
            .order_by(Participant.id.asc())
        )
        return list(session.scalars(stmt).all())

    def create(
        self,
        session: Session,
        drawing_id: str,
        name: str,
        phone: str,
        email: str | None,
        status: str,
    ) -> Participant:
        participant = Participant(drawing_id=drawing_id, name=name, phone=phone, email=email, status=status)
        session.add(participant)
        session.flush()  # assign PK
        return participant

    def try_set_status(self, session: Session, participant_id: int, status: str) -> bool:
        """Change status unless the participant is already rejected."""

        stmt = (
            update(Participant)
            .where(Participant.id == participant_id, Participant.status != ParticipantStatus.REJECTED.value)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        changed = session.execute(stmt).rowcount == 1
        if changed:
            participant = session.get(Participant, participant_id)
            if participant is not None:
                session.refresh(participant)
        return changed
