"""Repository layer for Winner persistence."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from giveaway.models.winner import Winner


class WinnerRepository:
    def list_for_drawing(self, session: Session, drawing_id: str) -> Sequence[Winner]:
        stmt = select(Winner).where(Winner.drawing_id == drawing_id).order_by(Winner.position.asc())
        return list(session.scalars(stmt).all())

    def clear(self, session: Session, drawing_id: str) -> int:
        stmt = delete(Winner).where(Winner.drawing_id == drawing_id).execution_options(synchronize_session=False)
        return int(session.execute(stmt).rowcount or 0)

    def clear_participant(self, session: Session, drawing_id: str, participant_id: int) -> int:
        stmt = (
            delete(Winner)
            .where(Winner.drawing_id == drawing_id, Winner.participant_id == participant_id)
            .execution_options(synchronize_session=False)
        )
        return int(session.execute(stmt).rowcount or 0)

    def add_all(self, session: Session, winners: Iterable[Winner]) -> list[Winner]:
        rows = list(winners)
        session.add_all(rows)
        session.flush()
        return rows
