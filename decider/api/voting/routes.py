from flask import Blueprint, request, current_app
from flasgger import swag_from
from flask_jwt_extended import jwt_required

from ...engine.ballots import submit_ballot
from ...engine.options import eligible_options
from ...schemas.option import OptionReadSchema
from ...schemas.vote import BallotSubmitSchema, VoteReadSchema
from ...utils.identity import current_user_id
from ...utils.validation import validate_or_abort
from ..common import load_for_member

voting_bp = Blueprint("voting", __name__)

ballot_submit_schema = BallotSubmitSchema()
vote_read_many_schema = VoteReadSchema(many=True)
option_read_many_schema = OptionReadSchema(many=True)


@voting_bp.get("/<uuid:decision_id>/ballot")
@jwt_required()
@swag_from({
    "tags": ["Voting"],
    "summary": "The options a ballot may name and the rules it must follow",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def get_ballot(decision_id):
    decision, member = load_for_member(decision_id, current_user_id())
    return {
        "decision_id": str(decision.id),
        "status": decision.status,
        "voting_mechanism": decision.voting_mechanism,
        "point_budget": current_app.config.get("POINT_BUDGET", 10),
        "has_voted": member.has_voted,
        "options": option_read_many_schema.dump(eligible_options(decision)),
    }, 200


@voting_bp.post("/<uuid:decision_id>/ballot")
@jwt_required()
@swag_from({
    "tags": ["Voting"],
    "summary": "Submit your whole ballot in one request (once per decision)",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "votes": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "option_id": {"type": "string", "example": "uuid"},
                            "value": {"type": "integer", "example": 6},
                        },
                    },
                },
            },
            "required": ["votes"],
        },
    }],
    "responses": {
        201: {"description": "Ballot recorded"},
        400: {"description": "Ballot breaks the mechanism's rules"},
        403: {"description": "Not a member"},
        409: {"description": "Already voted, or not in the voting phase"},
    },
})
def post_ballot(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(ballot_submit_schema, payload)

    user_id = current_user_id()
    votes = submit_ballot(decision_id, user_id, payload["votes"])
    current_app.logger.info("Ballot submitted decision=%s user=%s", decision_id, user_id)
    return {"message": "Ballot recorded", "votes": vote_read_many_schema.dump(votes)}, 201


@voting_bp.get("/<uuid:decision_id>/votes")
@jwt_required()
@swag_from({
    "tags": ["Voting"],
    "summary": "Individual votes, after lock and only if the decision reveals them",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def list_votes(decision_id):
    decision, _ = load_for_member(decision_id, current_user_id(), action="view_votes")
    return {"votes": vote_read_many_schema.dump(decision.votes)}, 200
