"""Repository layer for numbered-slot persistence.

Every state transition is one conditional UPDATE evaluated by the database.
The caller learns whether it won by the affected row count; nothing here
reads a row, decides in Python, and then writes it back.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import and_, func, insert, or_, select, update
from sqlalchemy.orm import Session

from giveaway.models.number_slot import NumberSlot, SlotStatus

_INSERT_CHUNK = 5_000


class NumberSlotRepository:
    """Slot pool reads and atomic slot transitions."""

    def count_for_drawing(self, session: Session, drawing_id: str) -> int:
        stmt = select(func.count()).select_from(NumberSlot).where(NumberSlot.drawing_id == drawing_id)
        return int(session.scalar(stmt) or 0)

    def bulk_create(self, session: Session, drawing_id: str, quantity: int, now: datetime) -> None:
        rows = (
            {
                "drawing_id": drawing_id,
                "number": n,
                "status": SlotStatus.AVAILABLE.value,
                "created_at": now,
                "updated_at": now,
            }
            for n in range(1, quantity + 1)
        )
        chunk: list[dict] = []
        for row in rows:
            chunk.append(row)
            if len(chunk) >= _INSERT_CHUNK:
                session.execute(insert(NumberSlot), chunk)
                chunk = []
        if chunk:
            session.execute(insert(NumberSlot), chunk)

    def list_by_numbers(self, session: Session, drawing_id: str, numbers: Iterable[int]) -> Sequence[NumberSlot]:
        stmt = (
            select(NumberSlot)
            .where(NumberSlot.drawing_id == drawing_id, NumberSlot.number.in_(list(numbers)))
            .order_by(NumberSlot.number.asc())
            # Transitions bypass the identity map; always reload row state.
            .execution_options(populate_existing=True)
        )
        return list(session.scalars(stmt).all())

    def count_by_status(self, session: Session, drawing_id: str) -> dict[str, int]:
        stmt = (
            select(NumberSlot.status, func.count())
            .where(NumberSlot.drawing_id == drawing_id)
            .group_by(NumberSlot.status)
        )
        return {str(status): int(count) for status, count in session.execute(stmt).all()}

    def numbers_for_participant(self, session: Session, drawing_id: str, participant_id: int) -> list[int]:
        stmt = (
            select(NumberSlot.number)
            .where(
                NumberSlot.drawing_id == drawing_id,
                NumberSlot.participant_id == participant_id,
                NumberSlot.status == SlotStatus.TAKEN.value,
            )
            .order_by(NumberSlot.number.asc())
        )
        return [int(n) for n in session.scalars(stmt).all()]

    def list_taken(self, session: Session, drawing_id: str) -> Sequence[NumberSlot]:
        stmt = (
            select(NumberSlot)
            .where(NumberSlot.drawing_id == drawing_id, NumberSlot.status == SlotStatus.TAKEN.value)
            .order_by(NumberSlot.number.asc())
            .execution_options(populate_existing=True)
        )
        return list(session.scalars(stmt).all())

    # -- transitions -------------------------------------------------------

    def try_reserve(
        self,
        session: Session,
        drawing_id: str,
        number: int,
        token: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        """available (or lapsed reservation) -> reserved."""

        stmt = (
            update(NumberSlot)
            .where(
                NumberSlot.drawing_id == drawing_id,
                NumberSlot.number == number,
                or_(
                    NumberSlot.status == SlotStatus.AVAILABLE.value,
                    and_(
                        NumberSlot.status == SlotStatus.RESERVED.value,
                        NumberSlot.reservation_expires_at <= now,
                    ),
                ),
            )
            .values(
                status=SlotStatus.RESERVED.value,
                reservation_token=token,
                reservation_expires_at=expires_at,
                participant_id=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount == 1

    def try_confirm(
        self,
        session: Session,
        drawing_id: str,
        number: int,
        token: str,
        participant_id: int,
        now: datetime,
    ) -> bool:
        """reserved (unexpired, matching token) -> taken."""

        stmt = (
            update(NumberSlot)
            .where(
                NumberSlot.drawing_id == drawing_id,
                NumberSlot.number == number,
                NumberSlot.status == SlotStatus.RESERVED.value,
                NumberSlot.reservation_token == token,
                NumberSlot.reservation_expires_at > now,
            )
            .values(
                status=SlotStatus.TAKEN.value,
                participant_id=participant_id,
                reservation_token=None,
                reservation_expires_at=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount == 1

    def release_expired(self, session: Session, now: datetime, drawing_id: str | None = None) -> int:
        """reserved (lapsed) -> available. Returns rows released."""

        conditions = [
            NumberSlot.status == SlotStatus.RESERVED.value,
            NumberSlot.reservation_expires_at <= now,
        ]
        if drawing_id is not None:
            conditions.append(NumberSlot.drawing_id == drawing_id)

        stmt = (
            update(NumberSlot)
            .where(*conditions)
            .values(
                status=SlotStatus.AVAILABLE.value,
                reservation_token=None,
                reservation_expires_at=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return int(session.execute(stmt).rowcount or 0)

    def release_participant(self, session: Session, drawing_id: str, participant_id: int, now: datetime) -> int:
        """taken by participant -> available (administrative unwind)."""

        stmt = (
            update(NumberSlot)
            .where(
                NumberSlot.drawing_id == drawing_id,
                NumberSlot.participant_id == participant_id,
                NumberSlot.status == SlotStatus.TAKEN.value,
            )
            .values(
                status=SlotStatus.AVAILABLE.value,
                participant_id=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return int(session.execute(stmt).rowcount or 0)
