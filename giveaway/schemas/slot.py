"""Schemas for the numbered-slot API."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from giveaway.schemas.common import MAX_SLOT_NUMBER, UtcDateTime


class ReserveRequestSchema(Schema):
    number = fields.Integer(required=True, strict=True, validate=validate.Range(min=1, max=MAX_SLOT_NUMBER))
    expiration_minutes = fields.Integer(required=False, load_default=None, strict=True, allow_none=True)


class ReservationSchema(Schema):
    """The token is echoed back by the client at registration time."""

    number = fields.Integer()
    reservation_token = fields.String(attribute="token")
    expires_at = UtcDateTime()


class SlotSchema(Schema):
    number = fields.Integer()
    status = fields.String()
    participant_id = fields.Integer(allow_none=True)
    expires_at = UtcDateTime()
    is_mine = fields.Boolean()


class DrawingStatsSchema(Schema):
    total = fields.Integer()
    available = fields.Integer()
    reserved = fields.Integer()
    taken = fields.Integer()
    percentage_taken = fields.Integer()
