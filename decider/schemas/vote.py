from marshmallow import Schema, fields, validate


class BallotLineSchema(Schema):
    option_id = fields.UUID(required=True)
    value = fields.Int(required=True, strict=True)


class BallotSubmitSchema(Schema):
    votes = fields.List(fields.Nested(BallotLineSchema), required=True, validate=validate.Length(min=1))


class VoteReadSchema(Schema):
    id = fields.UUID()
    user_id = fields.UUID()
    option_id = fields.UUID()
    value = fields.Int()
    created_at = fields.DateTime()
