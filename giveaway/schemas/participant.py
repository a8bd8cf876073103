"""Schemas for participant registration and review."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from giveaway.schemas.common import MAX_SLOT_NUMBER, UtcDateTime


class SelectionSchema(Schema):
    number = fields.Integer(required=True, strict=True, validate=validate.Range(min=1, max=MAX_SLOT_NUMBER))
    reservation_token = fields.String(required=True, validate=validate.Length(min=1, max=64))


class ParticipateRequestSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    phone = fields.String(required=True, validate=validate.Length(min=1, max=40))
    email = fields.Email(required=False, load_default=None, allow_none=True)
    selections = fields.List(fields.Nested(SelectionSchema), required=False, load_default=list)

    @validates_schema
    def _validate_unique_numbers(self, data, **kwargs):  # type: ignore[no-untyped-def]
        numbers = [s["number"] for s in data.get("selections") or []]
        if len(numbers) != len(set(numbers)):
            raise ValidationError({"selections": ["Numbers must be unique"]})


class ParticipantStatusSchema(Schema):
    status = fields.String(required=True, validate=validate.OneOf(["pending", "approved", "rejected"]))


class ParticipantSchema(Schema):
    """Serialize a participant together with the numbers it holds."""

    id = fields.Integer(attribute="participant.id")
    drawing_id = fields.String(attribute="participant.drawing_id")
    name = fields.String(attribute="participant.name")
    email = fields.String(attribute="participant.email", allow_none=True)
    phone = fields.String(attribute="participant.phone")
    status = fields.String(attribute="participant.status")
    created_at = UtcDateTime(attribute="participant.created_at")
    numbers = fields.List(fields.Integer())
