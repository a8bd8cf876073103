"""Shared fixtures: an app on a throwaway SQLite file and a controllable clock."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from giveaway import create_app
from giveaway.db import get_session_factory
from giveaway.models.participant import Participant, ParticipantStatus
from giveaway.repositories.participant_repository import ParticipantRepository
from giveaway.services.drawing_service import DrawingService
from giveaway.services.number_slot_service import NumberSlotService


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2030, 1, 1, 12, 0, 0))


@pytest.fixture
def app(tmp_path, clock):
    app = create_app(
        {
            "TESTING": True,
            "DATABASE_URL": f"sqlite:///{tmp_path / 'giveaway.db'}",
            "SCHEDULER_ENABLED": False,
        }
    )
    app.extensions["clock"] = clock
    yield app
    app.extensions["engine"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session_factory(app):
    return get_session_factory(app)


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def slots(clock) -> NumberSlotService:
    return NumberSlotService(clock=clock)


@pytest.fixture
def make_drawing(clock, slots):
    """Create a drawing (and its slot pool) ending a week after the fake now."""

    def _make(session, quantity: int = 100, owner_id: str = "host-1", **overrides):
        fields = {
            "title": "Spring giveaway",
            "end_at": clock() + timedelta(days=7),
            "play_with_numbers": quantity > 0,
            "quantity_of_numbers": quantity,
        }
        fields.update(overrides)
        return DrawingService(slots=slots).create_drawing(session, owner_id, **fields)

    return _make


@pytest.fixture
def make_participant():
    def _make(session, drawing_id: str, name: str = "Ana", status: ParticipantStatus = ParticipantStatus.APPROVED) -> Participant:
        return ParticipantRepository().create(
            session,
            drawing_id=drawing_id,
            name=name,
            phone="555-0100",
            email=None,
            status=status.value,
        )

    return _make
