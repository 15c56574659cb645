from marshmallow import Schema, fields, validate


class OptionCreateSchema(Schema):
    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=False, allow_none=True)
    metadata = fields.Dict(required=False, allow_none=True)


class ViolationSchema(Schema):
    constraint_id = fields.Str()
    reason = fields.Str()


class OptionReadSchema(Schema):
    id = fields.UUID()
    decision_id = fields.UUID()
    submitted_by = fields.UUID()
    position = fields.Int()
    title = fields.Str()
    description = fields.Str(allow_none=True)
    metadata = fields.Dict(attribute="details", allow_none=True)
    passes_constraints = fields.Bool()
    constraint_violations = fields.List(fields.Nested(ViolationSchema), allow_none=True)
    created_at = fields.DateTime()
