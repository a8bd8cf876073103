"""Winner ORM model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from giveaway.models.base import Base
from giveaway.utils.clock import utcnow


class Winner(Base):
    __tablename__ = "winners"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    drawing_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("drawings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    participant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[int | None] = mapped_column(Integer, nullable=True)  # numbered drawings only
    position: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-based draw order
    selection_method: Mapped[str] = mapped_column(String(16), nullable=False)  # random | number
    selected_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
