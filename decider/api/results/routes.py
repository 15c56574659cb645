from flask import Blueprint
from flasgger import swag_from
from flask_jwt_extended import jwt_required

from ...schemas.results import DecisionResultsSchema
from ...utils.identity import current_user_id
from ..common import load_for_member

results_bp = Blueprint("results", __name__)
results_schema = DecisionResultsSchema()


@results_bp.get("/<uuid:decision_id>/results")
@jwt_required()
@swag_from({
    "tags": ["Results"],
    "summary": "Ranked results of a locked decision",
    "responses": {
        200: {"description": "Results"},
        403: {"description": "Not a member"},
        404: {"description": "Decision not found"},
        409: {"description": "Decision not locked yet"},
    },
})
def get_results(decision_id):
    decision, _ = load_for_member(decision_id, current_user_id(), action="view_results")
    return results_schema.dump({
        "decision_id": decision.id,
        "status": decision.status,
        "voting_mechanism": decision.voting_mechanism,
        "locked_at": decision.locked_at,
        "results": decision.results,
    }), 200
