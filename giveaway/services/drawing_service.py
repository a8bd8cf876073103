"""Service layer for drawing use-cases."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from giveaway.errors import ForbiddenError, NotFoundError, ValidationError
from giveaway.models.drawing import Drawing
from giveaway.repositories.drawing_repository import DrawingRepository
from giveaway.services.number_slot_service import NumberSlotService
from giveaway.utils.clock import to_naive_utc

logger = logging.getLogger(__name__)


class DrawingService:
    """Create and look up drawings."""

    def __init__(
        self,
        slots: NumberSlotService | None = None,
        repository: DrawingRepository | None = None,
    ) -> None:
        self._slots = slots or NumberSlotService()
        self._repo = repository or DrawingRepository()

    def get_drawing(self, session: Session, drawing_id: str) -> Drawing:
        drawing = self._repo.get_by_id(session, drawing_id)
        if drawing is None:
            raise NotFoundError(message=f"Drawing {drawing_id} not found")
        return drawing

    def get_owned_drawing(self, session: Session, drawing_id: str, owner_id: str) -> Drawing:
        drawing = self.get_drawing(session, drawing_id)
        if drawing.owner_id != owner_id:
            raise ForbiddenError(message="Only the drawing owner can do this")
        return drawing

    def list_drawings(self, session: Session, owner_id: str) -> Sequence[Drawing]:
        return self._repo.list_for_owner(session, owner_id)

    def create_drawing(
        self,
        session: Session,
        owner_id: str,
        title: str,
        end_at: datetime,
        winner_selection: str = "random",
        play_with_numbers: bool = False,
        quantity_of_numbers: int = 0,
        winners_amount: int = 1,
        is_paid: bool = False,
        price: float = 0,
        guidelines: list[str] | None = None,
    ) -> Drawing:
        """Create a drawing; numbered drawings get their slot pool in the same transaction."""

        end_at = to_naive_utc(end_at)
        if end_at <= self._slots.now():
            raise ValidationError(message="Invalid end_at", details={"end_at": ["Must be in the future"]})

        if play_with_numbers:
            if quantity_of_numbers < 1:
                raise ValidationError(
                    message="Invalid quantity_of_numbers",
                    details={"quantity_of_numbers": ["Numbered drawings need at least one number"]},
                )
            if winners_amount > quantity_of_numbers:
                raise ValidationError(
                    message="Invalid winners_amount",
                    details={"winners_amount": ["Cannot exceed quantity_of_numbers"]},
                )
        else:
            if winner_selection == "manually":
                raise ValidationError(
                    message="Invalid winner_selection",
                    details={"winner_selection": ["Manual selection requires numbered play"]},
                )
            quantity_of_numbers = 0

        if is_paid and price <= 0:
            raise ValidationError(message="Invalid price", details={"price": ["Paid drawings need a price > 0"]})

        fields: dict[str, Any] = {
            "title": title.strip(),
            "end_at": end_at,
            "winner_selection": winner_selection,
            "play_with_numbers": play_with_numbers,
            "quantity_of_numbers": quantity_of_numbers,
            "winners_amount": winners_amount,
            "is_paid": is_paid,
            "price": price if is_paid else 0,
            "guidelines": [g.strip() for g in (guidelines or []) if g and g.strip()],
        }
        drawing = self._repo.create(session, owner_id, **fields)

        if drawing.play_with_numbers:
            self._slots.initialize(session, drawing.id, drawing.quantity_of_numbers)

        logger.info(
            "Created drawing %s owner=%s numbered=%s quantity=%s",
            drawing.id,
            owner_id,
            drawing.play_with_numbers,
            drawing.quantity_of_numbers,
        )
        return drawing
