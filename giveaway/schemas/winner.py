"""Schemas for winner selection."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from giveaway.schemas.common import MAX_SLOT_NUMBER, UtcDateTime


class SelectWinnersRequestSchema(Schema):
    winner_numbers = fields.List(
        fields.Integer(strict=True, validate=validate.Range(min=1, max=MAX_SLOT_NUMBER)),
        required=False,
        load_default=None,
        allow_none=True,
    )


class WinnerSchema(Schema):
    participant_id = fields.Integer()
    participant_name = fields.String()
    participant_email = fields.String(allow_none=True)
    participant_phone = fields.String()
    number = fields.Integer(allow_none=True)
    position = fields.Integer()
    selected_at = UtcDateTime()


class WinnersSchema(Schema):
    drawing_id = fields.String()
    winners = fields.List(fields.Nested(WinnerSchema))
    winner_numbers = fields.List(fields.Integer(), allow_none=True)
    selection_method = fields.String(allow_none=True)
