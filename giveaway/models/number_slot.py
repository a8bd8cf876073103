"""Numbered slot ORM model.

One row per (drawing, number). Rows are created in bulk when a numbered
drawing is created and are never deleted while the drawing exists.

State is stored in ``status``; the holder and reservation columns are only
meaningful for the matching status:

- available: participant_id, reservation_token, reservation_expires_at all NULL
- reserved:  reservation_token + reservation_expires_at set
- taken:     participant_id set, reservation columns NULL
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from giveaway.models.base import Base
from giveaway.utils.clock import utcnow


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    TAKEN = "taken"


class NumberSlot(Base):
    __tablename__ = "number_slots"
    __table_args__ = (
        UniqueConstraint("drawing_id", "number", name="uq_number_slots_drawing_number"),
        Index("ix_number_slots_drawing_status", "drawing_id", "status"),
        Index("ix_number_slots_status_expires", "status", "reservation_expires_at"),
        Index("ix_number_slots_drawing_participant", "drawing_id", "participant_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    drawing_id: Mapped[str] = mapped_column(String(32), ForeignKey("drawings.id", ondelete="CASCADE"), nullable=False)
    number: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..quantity_of_numbers
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=SlotStatus.AVAILABLE.value)

    participant_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("participants.id", ondelete="SET NULL"), nullable=True
    )
    reservation_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reservation_expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
