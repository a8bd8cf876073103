"""Marshmallow schemas for Comment."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from giveaway.schemas.common import UtcDateTime


class CommentSchema(Schema):
    """Serialize Comment."""

    id = fields.Int(required=True)
    participant_id = fields.Int(required=True)
    comment = fields.Str(required=True)
    created_at = UtcDateTime()


class CommentCreateSchema(Schema):
    """Validate create Comment payload."""

    comment = fields.Str(required=True, validate=validate.Length(min=1, max=2000))
