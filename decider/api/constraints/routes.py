from flask import Blueprint, request
from flasgger import swag_from
from flask_jwt_extended import jwt_required

from ...engine.constraints import submit_constraint, remove_constraint
from ...schemas.constraint import ConstraintCreateSchema, ConstraintReadSchema
from ...utils.identity import current_user_id
from ...utils.validation import validate_or_abort
from ..common import load_for_member

constraints_bp = Blueprint("constraints", __name__)

constraint_create_schema = ConstraintCreateSchema()
constraint_read_schema = ConstraintReadSchema()
constraint_read_many_schema = ConstraintReadSchema(many=True)


@constraints_bp.get("/<uuid:decision_id>/constraints")
@jwt_required()
@swag_from({
    "tags": ["Constraints"],
    "summary": "List a decision's constraints",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def list_constraints(decision_id):
    decision, _ = load_for_member(decision_id, current_user_id())
    return {"constraints": constraint_read_many_schema.dump(decision.constraints)}, 200


@constraints_bp.post("/<uuid:decision_id>/constraints")
@jwt_required()
@swag_from({
    "tags": ["Constraints"],
    "summary": "Add a constraint (constraints or options phase)",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "type": {"type": "string", "example": "budget_max"},
                "value": {"type": "object", "example": {"max": 30}},
                "weight": {"type": "integer", "example": 3},
            },
            "required": ["type", "value"],
        },
    }],
    "responses": {
        201: {"description": "Created"},
        400: {"description": "Validation error"},
        403: {"description": "Forbidden"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def create_constraint(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(constraint_create_schema, payload)

    constraint = submit_constraint(
        decision_id, current_user_id(), payload["type"], payload["value"], weight=payload.get("weight")
    )
    return {"constraint": constraint_read_schema.dump(constraint)}, 201


@constraints_bp.delete("/<uuid:decision_id>/constraints/<uuid:constraint_id>")
@jwt_required()
@swag_from({
    "tags": ["Constraints"],
    "summary": "Remove one of your own constraints before voting",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def delete_constraint(decision_id, constraint_id):
    remove_constraint(decision_id, constraint_id, current_user_id())
    return {"message": "Constraint removed"}, 200
