from __future__ import annotations

import random

import pytest

from giveaway.errors import ForbiddenError, ValidationError
from giveaway.models.participant import ParticipantStatus
from giveaway.services.participation_service import ParticipationService, Selection
from giveaway.services.winner_service import WinnerService


@pytest.fixture
def winners(slots) -> WinnerService:
    return WinnerService(slots=slots, rng=random.Random(1234))


@pytest.fixture
def register(slots):
    participation = ParticipationService(slots=slots)

    def _register(session, drawing_id: str, name: str, *numbers: int):
        selections = [Selection(n, slots.reserve(session, drawing_id, n).token) for n in numbers]
        return participation.register(session, drawing_id, name=name, phone="555-0100", selections=selections).participant

    return _register


def test_random_selection_only_picks_approved_holders(session, clock, winners, make_drawing, register):
    drawing = make_drawing(session, quantity=20, winners_amount=3, is_paid=True, price=5)
    ana = register(session, drawing.id, "Ana", 1, 2)
    bo = register(session, drawing.id, "Bo", 3)
    register(session, drawing.id, "Cy", 4, 5)  # stays pending
    for p in (ana, bo):
        p.status = ParticipantStatus.APPROVED.value
    session.flush()
    clock.advance(days=8)

    result = winners.select_winners(session, drawing.id, "host-1")

    assert len(result.winners) == 3
    assert sorted(result.winner_numbers) == [1, 2, 3]
    assert {w.participant_name for w in result.winners} == {"Ana", "Bo"}
    assert [w.position for w in result.winners] == [1, 2, 3]
    assert result.selection_method == "random"


def test_random_selection_caps_at_eligible_count(session, clock, winners, make_drawing, register):
    drawing = make_drawing(session, quantity=10, winners_amount=5)
    register(session, drawing.id, "Ana", 7)
    clock.advance(days=8)

    result = winners.select_winners(session, drawing.id, "host-1")

    assert result.winner_numbers == [7]


def test_manual_selection_keeps_given_order(session, clock, winners, make_drawing, register):
    drawing = make_drawing(session, quantity=10, winners_amount=2, winner_selection="manually")
    register(session, drawing.id, "Ana", 4)
    register(session, drawing.id, "Bo", 9)
    clock.advance(days=8)

    result = winners.select_winners(session, drawing.id, "host-1", winner_numbers=[9, 4])

    assert result.winner_numbers == [9, 4]
    assert [w.participant_name for w in result.winners] == ["Bo", "Ana"]
    assert result.selection_method == "number"


@pytest.mark.parametrize(
    "numbers",
    [
        None,
        [],
        [4, 4],
        [4, 9, 1],
        [5],
    ],
)
def test_manual_selection_rejects_bad_numbers(session, clock, winners, make_drawing, register, numbers):
    drawing = make_drawing(session, quantity=10, winners_amount=2, winner_selection="manually")
    register(session, drawing.id, "Ana", 4)
    register(session, drawing.id, "Bo", 9)
    clock.advance(days=8)

    with pytest.raises(ValidationError):
        winners.select_winners(session, drawing.id, "host-1", winner_numbers=numbers)


def test_winner_numbers_outside_manual_mode(session, clock, winners, make_drawing, register):
    drawing = make_drawing(session, quantity=10)
    register(session, drawing.id, "Ana", 4)
    clock.advance(days=8)

    with pytest.raises(ValidationError):
        winners.select_winners(session, drawing.id, "host-1", winner_numbers=[4])


def test_rerun_replaces_previous_winners(session, clock, winners, make_drawing, register):
    drawing = make_drawing(session, quantity=10, winners_amount=1, winner_selection="manually")
    register(session, drawing.id, "Ana", 4)
    register(session, drawing.id, "Bo", 9)
    clock.advance(days=8)

    winners.select_winners(session, drawing.id, "host-1", winner_numbers=[4])
    result = winners.select_winners(session, drawing.id, "host-1", winner_numbers=[9])

    assert result.winner_numbers == [9]
    assert len(winners.get_winners(session, drawing.id).winners) == 1


def test_plain_drawing_draws_from_approved_participants(session, clock, winners, make_drawing, make_participant):
    drawing = make_drawing(session, quantity=0, play_with_numbers=False, winners_amount=2)
    make_participant(session, drawing.id, name="Ana")
    make_participant(session, drawing.id, name="Bo")
    make_participant(session, drawing.id, name="Cy", status=ParticipantStatus.REJECTED)
    clock.advance(days=8)

    result = winners.select_winners(session, drawing.id, "host-1")

    assert {w.participant_name for w in result.winners} == {"Ana", "Bo"}
    assert all(w.number is None for w in result.winners)
    assert result.winner_numbers is None


def test_no_eligible_participants(session, clock, winners, make_drawing):
    drawing = make_drawing(session, quantity=10)
    clock.advance(days=8)

    with pytest.raises(ValidationError):
        winners.select_winners(session, drawing.id, "host-1")


def test_selection_waits_for_end(session, winners, make_drawing, register):
    drawing = make_drawing(session, quantity=10)
    register(session, drawing.id, "Ana", 4)

    with pytest.raises(ValidationError) as exc:
        winners.select_winners(session, drawing.id, "host-1")
    assert exc.value.message == "Drawing has not ended yet"


def test_only_owner_selects(session, clock, winners, make_drawing):
    drawing = make_drawing(session, quantity=10)
    clock.advance(days=8)

    with pytest.raises(ForbiddenError):
        winners.select_winners(session, drawing.id, "someone-else")


def test_get_winners_before_selection(session, winners, make_drawing):
    drawing = make_drawing(session, quantity=10)

    result = winners.get_winners(session, drawing.id)

    assert (result.winners, result.winner_numbers, result.selection_method) == ([], None, None)
