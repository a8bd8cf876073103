"""Drawing ORM model."""

from __future__ import annotations

import secrets
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from giveaway.models.base import Base
from giveaway.utils.clock import utcnow


def new_drawing_id() -> str:
    """10-char URL-safe identifier."""

    return secrets.token_urlsafe(8)[:10]


class Drawing(Base):
    """A giveaway/raffle event owning a participant list and, optionally, a slot pool."""

    __tablename__ = "drawings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_drawing_id)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    guidelines: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)

    winner_selection: Mapped[str] = mapped_column(String(16), nullable=False, default="random")  # random | manually
    play_with_numbers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    quantity_of_numbers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    winners_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    end_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    def is_ended(self, now: datetime) -> bool:
        return self.end_at <= now

    @property
    def uses_manual_selection(self) -> bool:
        return self.play_with_numbers and self.winner_selection == "manually"
