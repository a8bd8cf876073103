"""Repository layer for Drawing persistence."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from giveaway.models.drawing import Drawing


class DrawingRepository:
    """CRUD operations for Drawing."""

    def get_by_id(self, session: Session, drawing_id: str) -> Drawing | None:
        return session.get(Drawing, drawing_id)

    def list_for_owner(self, session: Session, owner_id: str) -> Sequence[Drawing]:
        stmt = select(Drawing).where(Drawing.owner_id == owner_id).order_by(Drawing.created_at.desc())
        return list(session.scalars(stmt).all())

    def create(self, session: Session, owner_id: str, **fields: Any) -> Drawing:
        drawing = Drawing(owner_id=owner_id, **fields)
        session.add(drawing)
        session.flush()  # assign PK
        return drawing
