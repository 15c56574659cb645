from marshmallow import Schema, fields, validate, validates_schema, ValidationError


class CommentCreateSchema(Schema):
    body = fields.Str(required=True, validate=validate.Length(min=1, max=1000))
    option_id = fields.UUID(required=False, allow_none=True)
    constraint_id = fields.UUID(required=False, allow_none=True)
    parent_id = fields.UUID(required=False, allow_none=True)

    @validates_schema
    def exactly_one_target(self, data, **kwargs):
        if (data.get("option_id") is None) == (data.get("constraint_id") is None):
            raise ValidationError("Provide exactly one of option_id or constraint_id")


class CommentReadSchema(Schema):
    id = fields.UUID()
    user_id = fields.UUID()
    option_id = fields.UUID(allow_none=True)
    constraint_id = fields.UUID(allow_none=True)
    parent_id = fields.UUID(allow_none=True)
    body = fields.Str()
    created_at = fields.DateTime()


class CommentNodeSchema(Schema):
    comment = fields.Nested(CommentReadSchema)
    replies = fields.List(fields.Nested(lambda: CommentNodeSchema()))
