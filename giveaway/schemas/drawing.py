"""Schemas for the drawings API."""

from __future__ import annotations

from datetime import timezone

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from giveaway.schemas.common import UtcDateTime


class DrawingCreateSchema(Schema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    guidelines = fields.List(
        fields.String(validate=validate.Length(max=500)),
        required=False,
        load_default=list,
        validate=validate.Length(max=50),
    )

    is_paid = fields.Boolean(required=False, load_default=False)
    price = fields.Float(required=False, load_default=0, validate=validate.Range(min=0))

    winner_selection = fields.String(
        required=False,
        load_default="random",
        validate=validate.OneOf(["random", "manually"]),
    )
    play_with_numbers = fields.Boolean(required=False, load_default=False)
    quantity_of_numbers = fields.Integer(required=False, load_default=0, validate=validate.Range(min=0))
    winners_amount = fields.Integer(required=False, load_default=1, validate=validate.Range(min=1, max=1000))

    # Naive timestamps are taken as UTC.
    end_at = fields.AwareDateTime(required=True, default_timezone=timezone.utc)

    @validates_schema
    def _validate_numbers(self, data, **kwargs):  # type: ignore[no-untyped-def]
        if data.get("play_with_numbers") and int(data.get("quantity_of_numbers") or 0) < 1:
            raise ValidationError({"quantity_of_numbers": ["Required (>= 1) when play_with_numbers is true"]})


class DrawingSchema(Schema):
    """Serialize Drawing."""

    id = fields.String()
    owner_id = fields.String()
    title = fields.String()
    guidelines = fields.List(fields.String())
    is_paid = fields.Boolean()
    price = fields.Float()
    winner_selection = fields.String()
    play_with_numbers = fields.Boolean()
    quantity_of_numbers = fields.Integer()
    winners_amount = fields.Integer()
    end_at = UtcDateTime()
    created_at = UtcDateTime()
