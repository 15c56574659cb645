from marshmallow import Schema, fields, validate

from ..models.constraint import Constraint


class ConstraintCreateSchema(Schema):
    type = fields.Str(required=True, validate=validate.OneOf(Constraint.VALID_TYPES))
    value = fields.Dict(required=True)
    weight = fields.Int(required=False, allow_none=True, strict=True)


class ConstraintReadSchema(Schema):
    id = fields.UUID()
    decision_id = fields.UUID()
    user_id = fields.UUID()
    type = fields.Str()
    value = fields.Dict()
    weight = fields.Int(allow_none=True)
    created_at = fields.DateTime()
