"""Number Slot Manager: owns the life cycle of a drawing's numbered-slot pool.

Slot states move only through the conditional updates in
``NumberSlotRepository``:

    available --reserve--> reserved --confirm--> taken
        ^                      |                    |
        +------ sweep ---------+                    |
        +------ release_participant (reject) -------+

Concurrent callers racing for the same (drawing, number) are arbitrated by
the database: whichever UPDATE matches the row first wins, every other
caller sees zero affected rows and gets a ConflictError. Conflicts are never
retried here; picking another number is the caller's decision.

Statistics and slot queries read stored state. A reservation that has lapsed
but has not been swept yet still reads as ``reserved`` until the next sweep
(which runs before every reservation attempt and on the background schedule).
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from giveaway.errors import ConflictError, NotFoundError, ValidationError
from giveaway.models.drawing import Drawing
from giveaway.models.number_slot import SlotStatus
from giveaway.repositories.drawing_repository import DrawingRepository
from giveaway.repositories.number_slot_repository import NumberSlotRepository
from giveaway.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

MSG_NOT_AVAILABLE = "Number no longer available, please choose another"
MSG_RESERVATION_LOST = "Number reservation expired or already taken"


@dataclass(frozen=True)
class DrawingStats:
    total: int
    available: int
    reserved: int
    taken: int
    percentage_taken: int


@dataclass(frozen=True)
class SlotView:
    """Public view of one slot. Reservation tokens never leave the service."""

    number: int
    status: str
    participant_id: int | None = None
    expires_at: datetime | None = None
    is_mine: bool = False


@dataclass(frozen=True)
class Reservation:
    drawing_id: str
    number: int
    token: str
    expires_at: datetime


def percentage_of(part: int, total: int) -> int:
    """Integer percent, rounded half up."""

    if total <= 0:
        return 0
    return (200 * part + total) // (2 * total)


class NumberSlotService:
    """Initialize, query, reserve, confirm and sweep numbered slots."""

    def __init__(
        self,
        repository: NumberSlotRepository | None = None,
        drawings: DrawingRepository | None = None,
        clock: Clock = utcnow,
        default_expiration_minutes: int = 15,
        max_expiration_minutes: int = 60,
        max_batch: int = 500,
        max_quantity: int = 100_000,
    ) -> None:
        self._repo = repository or NumberSlotRepository()
        self._drawings = drawings or DrawingRepository()
        self._clock = clock
        self._default_expiration_minutes = default_expiration_minutes
        self._max_expiration_minutes = max_expiration_minutes
        self._max_batch = max_batch
        self._max_quantity = max_quantity

    @classmethod
    def from_config(cls, config: Mapping[str, Any], clock: Clock = utcnow) -> "NumberSlotService":
        return cls(
            clock=clock,
            default_expiration_minutes=int(config.get("RESERVATION_DEFAULT_MINUTES", 15)),
            max_expiration_minutes=int(config.get("RESERVATION_MAX_MINUTES", 60)),
            max_batch=int(config.get("SLOT_QUERY_MAX_BATCH", 500)),
            max_quantity=int(config.get("MAX_QUANTITY_OF_NUMBERS", 100_000)),
        )

    @property
    def max_quantity(self) -> int:
        return self._max_quantity

    def now(self) -> datetime:
        return self._clock()

    def _numbered_drawing(self, session: Session, drawing_id: str) -> Drawing:
        drawing = self._drawings.get_by_id(session, drawing_id)
        if drawing is None:
            raise NotFoundError(message=f"Drawing {drawing_id} not found")
        if not drawing.play_with_numbers:
            raise ValidationError(
                message="Drawing does not use numbered slots",
                details={"drawing_id": [f"{drawing_id} is not a numbered drawing"]},
            )
        return drawing

    def _check_number(self, number: int) -> int:
        """Numbers above MAX_QUANTITY_OF_NUMBERS cannot belong to any drawing."""

        if isinstance(number, bool) or not isinstance(number, int):
            raise ValidationError(message="Invalid number", details={"number": ["Must be an integer"]})
        if not 1 <= number <= self._max_quantity:
            raise ValidationError(
                message="Invalid number",
                details={"number": [f"Must be within 1..{self._max_quantity}"]},
            )
        return number

    # -- initialization ----------------------------------------------------

    def initialize(self, session: Session, drawing_id: str, quantity: int) -> int:
        """Create slots 1..quantity, all available. A second call is a ConflictError."""

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError(
                message="Invalid quantity",
                details={"quantity_of_numbers": ["Must be a positive integer"]},
            )
        if quantity > self._max_quantity:
            raise ValidationError(
                message="Invalid quantity",
                details={"quantity_of_numbers": [f"Must be <= {self._max_quantity}"]},
            )

        drawing = self._numbered_drawing(session, drawing_id)

        if self._repo.count_for_drawing(session, drawing.id) > 0:
            raise ConflictError(message=f"Slots for drawing {drawing_id} are already initialized")

        try:
            self._repo.bulk_create(session, drawing.id, quantity, now=self.now())
        except IntegrityError as exc:
            # A concurrent initializer inserted first.
            raise ConflictError(message=f"Slots for drawing {drawing_id} are already initialized") from exc

        logger.info("Initialized %s slots for drawing %s", quantity, drawing_id)
        return quantity

    # -- queries -----------------------------------------------------------

    def get_slots(
        self,
        session: Session,
        drawing_id: str,
        numbers: Iterable[int],
        reservation_token: str | None = None,
    ) -> list[SlotView]:
        """Status for an explicit, bounded batch of numbers, in ascending order."""

        requested = sorted({self._check_number(n) for n in numbers})
        if not requested:
            raise ValidationError(message="Missing numbers", details={"numbers": ["At least one number is required"]})
        if len(requested) > self._max_batch:
            raise ValidationError(
                message="Too many numbers requested",
                details={"numbers": [f"At most {self._max_batch} numbers per request"]},
            )

        drawing = self._numbered_drawing(session, drawing_id)
        slots = self._repo.list_by_numbers(session, drawing.id, requested)

        found = {s.number for s in slots}
        missing = [n for n in requested if n not in found]
        if missing:
            raise NotFoundError(
                message="Numbers outside the drawing's range",
                details={"numbers": missing},
            )

        views: list[SlotView] = []
        for slot in slots:
            if slot.status == SlotStatus.TAKEN.value:
                views.append(SlotView(number=slot.number, status=slot.status, participant_id=slot.participant_id))
            elif (
                slot.status == SlotStatus.RESERVED.value
                and reservation_token
                and secrets.compare_digest(slot.reservation_token or "", reservation_token)
            ):
                views.append(
                    SlotView(
                        number=slot.number,
                        status=slot.status,
                        expires_at=slot.reservation_expires_at,
                        is_mine=True,
                    )
                )
            else:
                views.append(SlotView(number=slot.number, status=slot.status))
        return views

    def get_stats(self, session: Session, drawing_id: str) -> DrawingStats:
        drawing = self._numbered_drawing(session, drawing_id)
        counts = self._repo.count_by_status(session, drawing.id)

        available = counts.get(SlotStatus.AVAILABLE.value, 0)
        reserved = counts.get(SlotStatus.RESERVED.value, 0)
        taken = counts.get(SlotStatus.TAKEN.value, 0)
        total = available + reserved + taken

        return DrawingStats(
            total=total,
            available=available,
            reserved=reserved,
            taken=taken,
            percentage_taken=percentage_of(taken, total),
        )

    def get_participant_numbers(self, session: Session, drawing_id: str, participant_id: int) -> list[int]:
        return self._repo.numbers_for_participant(session, drawing_id, participant_id)

    # -- transitions -------------------------------------------------------

    def reserve(
        self,
        session: Session,
        drawing_id: str,
        number: int,
        expiration_minutes: int | None = None,
    ) -> Reservation:
        """Place a time-boxed hold on one available number."""

        self._check_number(number)
        minutes = self._default_expiration_minutes if expiration_minutes is None else expiration_minutes
        if isinstance(minutes, bool) or not isinstance(minutes, int) or not 1 <= minutes <= self._max_expiration_minutes:
            raise ValidationError(
                message="Invalid expiration_minutes",
                details={"expiration_minutes": [f"Must be within 1..{self._max_expiration_minutes}"]},
            )

        drawing = self._numbered_drawing(session, drawing_id)
        now = self.now()
        if drawing.is_ended(now):
            raise ValidationError(message="Drawing has already ended")

        # Reclaim lapsed holds first so a stale reservation never blocks this attempt.
        self.release_expired(session, drawing_id=drawing.id)

        token = secrets.token_urlsafe(24)
        expires_at = now + timedelta(minutes=minutes)
        if not self._repo.try_reserve(session, drawing.id, number, token, expires_at, now):
            logger.info("Reserve conflict drawing=%s number=%s", drawing_id, number)
            raise ConflictError(message=MSG_NOT_AVAILABLE, details={"number": number})

        logger.info("Reserved drawing=%s number=%s until %s", drawing_id, number, expires_at.isoformat())
        return Reservation(drawing_id=drawing.id, number=number, token=token, expires_at=expires_at)

    def confirm(
        self,
        session: Session,
        drawing_id: str,
        number: int,
        participant_id: int,
        reservation_token: str,
    ) -> None:
        """Turn the caller's unexpired reservation into a permanent assignment."""

        self._check_number(number)
        if not reservation_token:
            raise ValidationError(
                message="Missing reservation token",
                details={"reservation_token": ["Required to confirm a number"]},
            )

        if not self._repo.try_confirm(session, drawing_id, number, reservation_token, participant_id, self.now()):
            logger.info(
                "Confirm conflict drawing=%s number=%s participant=%s", drawing_id, number, participant_id
            )
            raise ConflictError(message=MSG_RESERVATION_LOST, details={"number": number})

        logger.info("Confirmed drawing=%s number=%s participant=%s", drawing_id, number, participant_id)

    def release_expired(self, session: Session, drawing_id: str | None = None) -> int:
        """Expiry sweep. Returns how many lapsed reservations went back to available."""

        released = self._repo.release_expired(session, self.now(), drawing_id=drawing_id)
        if released:
            logger.info("Released %s expired reservation(s)%s", released, f" in drawing {drawing_id}" if drawing_id else "")
        return released

    def release_participant(self, session: Session, drawing_id: str, participant_id: int) -> int:
        released = self._repo.release_participant(session, drawing_id, participant_id, self.now())
        if released:
            logger.info("Returned %s number(s) of participant %s in drawing %s", released, participant_id, drawing_id)
        return released
