"""Participant registration and host review."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.orm import Session

from giveaway.errors import ConflictError, NotFoundError, ValidationError
from giveaway.models.participant import Participant, ParticipantStatus
from giveaway.repositories.participant_repository import ParticipantRepository
from giveaway.repositories.winner_repository import WinnerRepository
from giveaway.services.drawing_service import DrawingService
from giveaway.services.number_slot_service import NumberSlotService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """A number the registrant reserved, with the token Reserve handed back."""

    number: int
    reservation_token: str


@dataclass(frozen=True)
class ParticipantWithNumbers:
    participant: Participant
    numbers: list[int]


class ParticipationService:
    """Registration, lookup and status changes for participants."""

    def __init__(
        self,
        slots: NumberSlotService | None = None,
        drawings: DrawingService | None = None,
        repository: ParticipantRepository | None = None,
        winners: WinnerRepository | None = None,
        max_selections: int = 10,
    ) -> None:
        self._slots = slots or NumberSlotService()
        self._drawings = drawings or DrawingService(slots=self._slots)
        self._repo = repository or ParticipantRepository()
        self._winners = winners or WinnerRepository()
        self._max_selections = max_selections

    def register(
        self,
        session: Session,
        drawing_id: str,
        name: str,
        phone: str,
        email: str | None = None,
        selections: Sequence[Selection] = (),
    ) -> ParticipantWithNumbers:
        """Create a participant and confirm their reserved numbers.

        Runs inside the caller's transaction. If any confirm loses, the
        ConflictError propagates and the caller rolls back, taking the new
        participant row with it.
        """

        drawing = self._drawings.get_drawing(session, drawing_id)
        if drawing.is_ended(self._slots.now()):
            raise ValidationError(message="Drawing has already ended")

        name = name.strip()
        phone = phone.strip()
        if not name or not phone:
            raise ValidationError(
                message="Name and phone are required",
                details={k: ["Must not be blank"] for k, v in (("name", name), ("phone", phone)) if not v},
            )

        if drawing.play_with_numbers:
            if not selections:
                raise ValidationError(
                    message="Please select a number",
                    details={"selections": ["At least one reserved number is required"]},
                )
            if len(selections) > self._max_selections:
                raise ValidationError(
                    message="Too many numbers selected",
                    details={"selections": [f"At most {self._max_selections} numbers per registration"]},
                )
            numbers = [s.number for s in selections]
            if len(numbers) != len(set(numbers)):
                raise ValidationError(message="Duplicate numbers", details={"selections": ["Numbers must be unique"]})
        elif selections:
            raise ValidationError(
                message="Drawing does not use numbered slots",
                details={"selections": ["Not accepted for this drawing"]},
            )

        status = ParticipantStatus.PENDING if drawing.is_paid else ParticipantStatus.APPROVED
        participant = self._repo.create(
            session,
            drawing_id=drawing.id,
            name=name,
            phone=phone,
            email=(email or "").strip() or None,
            status=status.value,
        )

        for selection in selections:
            self._slots.confirm(
                session,
                drawing.id,
                selection.number,
                participant_id=participant.id,
                reservation_token=selection.reservation_token,
            )

        logger.info(
            "Registered participant %s in drawing %s with %s number(s)",
            participant.id,
            drawing.id,
            len(selections),
        )
        return ParticipantWithNumbers(participant=participant, numbers=sorted(s.number for s in selections))

    def get_participant(self, session: Session, drawing_id: str, participant_id: int) -> ParticipantWithNumbers:
        participant = self._repo.get_in_drawing(session, drawing_id, participant_id)
        if participant is None:
            raise NotFoundError(message=f"Participant {participant_id} not found")
        numbers = self._slots.get_participant_numbers(session, drawing_id, participant_id)
        return ParticipantWithNumbers(participant=participant, numbers=numbers)

    def list_participants(self, session: Session, drawing_id: str, owner_id: str) -> list[ParticipantWithNumbers]:
        drawing = self._drawings.get_owned_drawing(session, drawing_id, owner_id)
        return [
            ParticipantWithNumbers(
                participant=p,
                numbers=self._slots.get_participant_numbers(session, drawing.id, p.id),
            )
            for p in self._repo.list_for_drawing(session, drawing.id)
        ]

    def get_owned_participant(self, session: Session, participant_id: int, owner_id: str) -> Participant:
        """Participant lookup gated on owning its drawing."""

        participant = self._repo.get_by_id(session, participant_id)
        if participant is None:
            raise NotFoundError(message=f"Participant {participant_id} not found")
        self._drawings.get_owned_drawing(session, participant.drawing_id, owner_id)
        return participant

    def update_status(self, session: Session, participant_id: int, owner_id: str, status: str) -> Participant:
        try:
            new_status = ParticipantStatus(status)
        except ValueError as exc:
            raise ValidationError(
                message="Invalid status",
                details={"status": ["Must be one of pending|approved|rejected"]},
            ) from exc

        participant = self.get_owned_participant(session, participant_id, owner_id)

        if not self._repo.try_set_status(session, participant.id, new_status.value):
            raise ConflictError(message="Rejected participants cannot be changed")

        if new_status is ParticipantStatus.REJECTED:
            self._slots.release_participant(session, participant.drawing_id, participant.id)
            self._winners.clear_participant(session, participant.drawing_id, participant.id)

        logger.info("Participant %s status -> %s", participant.id, new_status.value)
        return participant
