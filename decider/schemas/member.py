from marshmallow import Schema, fields, validate


class JoinSchema(Schema):
    invite_code = fields.Str(required=True, validate=validate.Length(min=4, max=16))


class TransferOrganizerSchema(Schema):
    user_id = fields.UUID(required=True)


class MemberReadSchema(Schema):
    id = fields.UUID()
    user_id = fields.UUID()
    role = fields.Str()
    # None when hidden by silent voting
    has_voted = fields.Bool(allow_none=True)
    joined_at = fields.DateTime()
