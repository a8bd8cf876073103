"""Request-scoped helpers shared by the route modules."""

from __future__ import annotations

from flask import current_app, request

from giveaway.errors import UnauthorizedError
from giveaway.services.comment_service import CommentService
from giveaway.services.drawing_service import DrawingService
from giveaway.services.number_slot_service import NumberSlotService
from giveaway.services.participation_service import ParticipationService
from giveaway.services.winner_service import WinnerService
from giveaway.utils.clock import Clock, utcnow


def current_clock() -> Clock:
    return current_app.extensions.get("clock", utcnow)


def current_user_id() -> str:
    """Authenticated user id, as set by the upstream auth gateway."""

    header = str(current_app.config.get("AUTH_USER_HEADER", "X-User-Id"))
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise UnauthorizedError(message="Unauthorized. Please log in.")
    return user_id


def slot_service() -> NumberSlotService:
    return NumberSlotService.from_config(current_app.config, clock=current_clock())


def drawing_service() -> DrawingService:
    return DrawingService(slots=slot_service())


def participation_service() -> ParticipationService:
    slots = slot_service()
    return ParticipationService(
        slots=slots,
        drawings=DrawingService(slots=slots),
        max_selections=int(current_app.config.get("MAX_SELECTIONS_PER_REGISTRATION", 10)),
    )


def winner_service() -> WinnerService:
    slots = slot_service()
    return WinnerService(slots=slots, drawings=DrawingService(slots=slots))


def comment_service() -> CommentService:
    return CommentService(participants=participation_service())
