from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from ..models.decision import Decision
from .common import NaiveUTCDateTime


class DecisionCreateSchema(Schema):
    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=False, allow_none=True)
    type_label = fields.Str(required=False, allow_none=True, validate=validate.Length(max=50))
    lock_time = NaiveUTCDateTime(required=True)
    voting_mechanism = fields.Str(required=False, validate=validate.OneOf(Decision.VALID_MECHANISMS))
    max_options = fields.Int(required=False, strict=True, validate=validate.Range(min=2))
    option_submission = fields.Str(required=False, validate=validate.OneOf(Decision.VALID_SUBMISSION_MODES))
    reveal_votes_after_lock = fields.Bool(required=False)
    silent_voting = fields.Bool(required=False)
    constraint_weighting_enabled = fields.Bool(required=False)


class DecisionUpdateSchema(Schema):
    title = fields.Str(required=False, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=False)
    type_label = fields.Str(required=False, validate=validate.Length(max=50))

    @validates_schema
    def at_least_one_field(self, data, **kwargs):
        if not data:
            raise ValidationError("At least one field must be provided")


class DecisionDuplicateSchema(Schema):
    lock_time = NaiveUTCDateTime(required=True)
    title = fields.Str(required=False, validate=validate.Length(min=1, max=200))


class DecisionReadSchema(Schema):
    id = fields.UUID()
    title = fields.Str()
    description = fields.Str(allow_none=True)
    type_label = fields.Str(allow_none=True)
    created_by = fields.UUID()
    lock_time = fields.DateTime()
    status = fields.Str()
    voting_mechanism = fields.Str()
    max_options = fields.Int()
    option_submission = fields.Str()
    reveal_votes_after_lock = fields.Bool()
    silent_voting = fields.Bool()
    constraint_weighting_enabled = fields.Bool()
    invite_code = fields.Str()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
    locked_at = fields.DateTime(allow_none=True)


class PhaseChangeSchema(Schema):
    # Optional new deadline, set together with the phase change
    lock_time = NaiveUTCDateTime(required=False, allow_none=True)


class AdvanceVoteSchema(Schema):
    from_phase = fields.Str(
        required=True,
        validate=validate.OneOf([Decision.STATUS_CONSTRAINTS, Decision.STATUS_OPTIONS]),
    )


class AdvanceVoteStatusSchema(Schema):
    from_phase = fields.Str()
    voters = fields.List(fields.UUID())
    member_count = fields.Int()
    threshold = fields.Int()
    threshold_reached = fields.Bool()
    advanced = fields.Bool()
