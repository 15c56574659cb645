from marshmallow import Schema, fields


class ResultReadSchema(Schema):
    option_id = fields.UUID(required=True)
    option_title = fields.Str(attribute="option.title")
    total_points = fields.Int(required=True)
    average_rank = fields.Float(allow_none=True)
    rank = fields.Int(required=True)
    is_winner = fields.Bool(required=True)


class DecisionResultsSchema(Schema):
    decision_id = fields.UUID(required=True)
    status = fields.Str(required=True)
    voting_mechanism = fields.Str(required=True)
    locked_at = fields.DateTime(allow_none=True)
    results = fields.List(fields.Nested(ResultReadSchema), required=True)
