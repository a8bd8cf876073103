"""ORM models."""

from giveaway.models.comment import Comment
from giveaway.models.drawing import Drawing
from giveaway.models.number_slot import NumberSlot, SlotStatus
from giveaway.models.participant import Participant, ParticipantStatus
from giveaway.models.winner import Winner

__all__ = [
    "Comment",
    "Drawing",
    "NumberSlot",
    "Participant",
    "ParticipantStatus",
    "SlotStatus",
    "Winner",
]
