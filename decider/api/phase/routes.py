from flask import Blueprint, request, current_app
from flasgger import swag_from
from flask_jwt_extended import jwt_required

from ...engine.advance_votes import count_advance_votes, record_advance_vote, retract_advance_vote
from ...engine.lifecycle import advance_phase, revert_phase
from ...schemas.decision import AdvanceVoteSchema, AdvanceVoteStatusSchema, DecisionReadSchema, PhaseChangeSchema
from ...utils.identity import current_user_id
from ...utils.validation import validate_or_abort
from ..common import load_for_member

phase_bp = Blueprint("phase", __name__)

phase_change_schema = PhaseChangeSchema()
advance_vote_schema = AdvanceVoteSchema()
advance_status_schema = AdvanceVoteStatusSchema()
decision_read_schema = DecisionReadSchema()

_phase_body = [{
    "in": "body",
    "name": "body",
    "required": False,
    "schema": {
        "type": "object",
        "properties": {"lock_time": {"type": "string", "example": "2026-11-01T18:00:00Z"}},
    },
}]


@phase_bp.post("/<uuid:decision_id>/phase/advance")
@jwt_required()
@swag_from({
    "tags": ["Phase"],
    "summary": "Organizer moves constraints -> options or options -> voting",
    "parameters": _phase_body,
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def post_advance(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(phase_change_schema, payload)

    user_id = current_user_id()
    decision = advance_phase(decision_id, user_id, lock_time=payload.get("lock_time"))
    current_app.logger.info("Decision %s advanced to %s by %s", decision_id, decision.status, user_id)
    return {"decision": decision_read_schema.dump(decision)}, 200


@phase_bp.post("/<uuid:decision_id>/phase/revert")
@jwt_required()
@swag_from({
    "tags": ["Phase"],
    "summary": "Organizer steps back a phase; later-phase data is deleted",
    "parameters": _phase_body,
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def post_revert(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(phase_change_schema, payload)

    user_id = current_user_id()
    decision = revert_phase(decision_id, user_id, lock_time=payload.get("lock_time"))
    current_app.logger.info("Decision %s reverted to %s by %s", decision_id, decision.status, user_id)
    return {"decision": decision_read_schema.dump(decision)}, 200


@phase_bp.get("/<uuid:decision_id>/advance-votes")
@jwt_required()
@swag_from({
    "tags": ["Phase"],
    "summary": "Who has voted to leave the current phase, and how many are needed",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def get_advance_votes(decision_id):
    decision, _ = load_for_member(decision_id, current_user_id())
    from_phase = request.args.get("from_phase") or decision.status
    return {"advance_votes": advance_status_schema.dump(count_advance_votes(decision.id, from_phase))}, 200


@phase_bp.post("/<uuid:decision_id>/advance-votes")
@jwt_required()
@swag_from({
    "tags": ["Phase"],
    "summary": "Vote to leave the current phase; a majority advances it",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {"from_phase": {"type": "string", "example": "constraints"}},
            "required": ["from_phase"],
        },
    }],
    "responses": {
        200: {"description": "OK"},
        400: {"description": "Validation error"},
        403: {"description": "Forbidden"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def post_advance_vote(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(advance_vote_schema, payload)

    status = record_advance_vote(decision_id, current_user_id(), payload["from_phase"])
    return {"advance_votes": advance_status_schema.dump(status)}, 200


@phase_bp.delete("/<uuid:decision_id>/advance-votes")
@jwt_required()
@swag_from({
    "tags": ["Phase"],
    "summary": "Take back your vote to leave the current phase",
    "parameters": [{"in": "query", "name": "from_phase", "type": "string", "required": True}],
    "responses": {
        200: {"description": "OK"},
        400: {"description": "Validation error"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def delete_advance_vote(decision_id):
    payload = validate_or_abort(advance_vote_schema, request.args.to_dict())

    status = retract_advance_vote(decision_id, current_user_id(), payload["from_phase"])
    return {"advance_votes": advance_status_schema.dump(status)}, 200
