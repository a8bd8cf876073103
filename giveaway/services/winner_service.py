"""Winner selection for ended drawings."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from giveaway.errors import ValidationError
from giveaway.models.drawing import Drawing
from giveaway.models.participant import Participant, ParticipantStatus
from giveaway.models.winner import Winner
from giveaway.repositories.number_slot_repository import NumberSlotRepository
from giveaway.repositories.participant_repository import ParticipantRepository
from giveaway.repositories.winner_repository import WinnerRepository
from giveaway.services.drawing_service import DrawingService
from giveaway.services.number_slot_service import NumberSlotService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WinnerEntry:
    participant_id: int
    participant_name: str
    participant_email: str | None
    participant_phone: str
    number: int | None
    position: int
    selected_at: datetime


@dataclass(frozen=True)
class WinnersResult:
    drawing_id: str
    winners: list[WinnerEntry]
    winner_numbers: list[int] | None
    selection_method: str | None


class WinnerService:
    """Random or host-chosen winner selection."""

    def __init__(
        self,
        slots: NumberSlotService | None = None,
        drawings: DrawingService | None = None,
        slot_repository: NumberSlotRepository | None = None,
        participants: ParticipantRepository | None = None,
        repository: WinnerRepository | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._slots = slots or NumberSlotService()
        self._drawings = drawings or DrawingService(slots=self._slots)
        self._slot_repo = slot_repository or NumberSlotRepository()
        self._participants = participants or ParticipantRepository()
        self._repo = repository or WinnerRepository()
        self._rng = rng or random.SystemRandom()

    def select_winners(
        self,
        session: Session,
        drawing_id: str,
        owner_id: str,
        winner_numbers: Iterable[int] | None = None,
    ) -> WinnersResult:
        """Clear previous winners and draw a new set.

        Manual mode (numbered drawing with ``winner_selection == "manually"``)
        requires ``winner_numbers``; every other drawing is drawn at random.
        """

        drawing = self._drawings.get_owned_drawing(session, drawing_id, owner_id)
        now = self._slots.now()
        if not drawing.is_ended(now):
            raise ValidationError(
                message="Drawing has not ended yet",
                details={"end_at": [drawing.end_at.isoformat()]},
            )

        numbers = list(winner_numbers) if winner_numbers is not None else None

        if drawing.uses_manual_selection:
            winners = self._manual(session, drawing, numbers, now)
        else:
            if numbers:
                raise ValidationError(
                    message="Winner numbers are only accepted for manual selection mode",
                    details={"winner_numbers": ["Not accepted for this drawing"]},
                )
            winners = self._random(session, drawing, now)

        cleared = self._repo.clear(session, drawing.id)
        self._repo.add_all(session, winners)

        logger.info(
            "Selected %s winner(s) for drawing %s (cleared %s previous)",
            len(winners),
            drawing.id,
            cleared,
        )
        return self.get_winners(session, drawing.id)

    def _eligible_taken(self, session: Session, drawing: Drawing) -> tuple[dict[int, int], dict[int, Participant]]:
        """number -> participant_id for taken slots whose holder is approved."""

        taken = self._slot_repo.list_taken(session, drawing.id)
        holders = self._participants.list_by_ids(
            session, sorted({s.participant_id for s in taken if s.participant_id is not None})
        )
        by_number = {
            s.number: s.participant_id
            for s in taken
            if s.participant_id in holders and holders[s.participant_id].status == ParticipantStatus.APPROVED.value
        }
        return by_number, holders

    def _manual(self, session: Session, drawing: Drawing, numbers: list[int] | None, now: datetime) -> list[Winner]:
        if not numbers:
            raise ValidationError(
                message="Winner numbers are required for manual selection mode",
                details={"winner_numbers": ["At least one number is required"]},
            )
        if len(numbers) != len(set(numbers)):
            raise ValidationError(message="Duplicate winner numbers", details={"winner_numbers": ["Numbers must be unique"]})
        if len(numbers) > drawing.winners_amount:
            raise ValidationError(
                message="Too many winner numbers",
                details={"winner_numbers": [f"At most {drawing.winners_amount} winner(s) for this drawing"]},
            )

        eligible, _ = self._eligible_taken(session, drawing)
        invalid = [n for n in numbers if n not in eligible]
        if invalid:
            raise ValidationError(
                message="Some winner numbers are not held by an approved participant",
                details={"winner_numbers": invalid},
            )

        return [
            Winner(
                drawing_id=drawing.id,
                participant_id=eligible[n],
                number=n,
                position=i,
                selection_method="number",
                selected_at=now,
            )
            for i, n in enumerate(numbers, start=1)
        ]

    def _random(self, session: Session, drawing: Drawing, now: datetime) -> list[Winner]:
        if drawing.play_with_numbers:
            eligible, _ = self._eligible_taken(session, drawing)
            if not eligible:
                raise ValidationError(message="No eligible participants: no approved participant holds a number")
            picked = self._rng.sample(sorted(eligible), min(drawing.winners_amount, len(eligible)))
            return [
                Winner(
                    drawing_id=drawing.id,
                    participant_id=eligible[n],
                    number=n,
                    position=i,
                    selection_method="random",
                    selected_at=now,
                )
                for i, n in enumerate(picked, start=1)
            ]

        approved = self._participants.list_approved(session, drawing.id)
        if not approved:
            raise ValidationError(message="No eligible participants: no approved participants")
        chosen = self._rng.sample(list(approved), min(drawing.winners_amount, len(approved)))
        return [
            Winner(
                drawing_id=drawing.id,
                participant_id=p.id,
                number=None,
                position=i,
                selection_method="random",
                selected_at=now,
            )
            for i, p in enumerate(chosen, start=1)
        ]

    def get_winners(self, session: Session, drawing_id: str) -> WinnersResult:
        drawing = self._drawings.get_drawing(session, drawing_id)
        rows = self._repo.list_for_drawing(session, drawing.id)
        people = self._participants.list_by_ids(session, sorted({w.participant_id for w in rows}))

        entries = [
            WinnerEntry(
                participant_id=w.participant_id,
                participant_name=people[w.participant_id].name,
                participant_email=people[w.participant_id].email,
                participant_phone=people[w.participant_id].phone,
                number=w.number,
                position=w.position,
                selected_at=w.selected_at,
            )
            for w in rows
            if w.participant_id in people
        ]
        numbers = [e.number for e in entries if e.number is not None]
        return WinnersResult(
            drawing_id=drawing.id,
            winners=entries,
            winner_numbers=numbers or None,
            selection_method=rows[0].selection_method if rows else None,
        )
