from flask import Blueprint, request, current_app
from flasgger import swag_from
from flask_jwt_extended import jwt_required

from ...engine import decisions as decisions_engine
from ...engine.lifecycle import legal_actions
from ...schemas.decision import (
    DecisionCreateSchema,
    DecisionUpdateSchema,
    DecisionDuplicateSchema,
    DecisionReadSchema,
)
from ...schemas.member import MemberReadSchema
from ...utils.identity import current_user_id
from ...utils.validation import validate_or_abort
from ..common import load_for_member

decisions_bp = Blueprint("decisions", __name__)

decision_create_schema = DecisionCreateSchema()
decision_update_schema = DecisionUpdateSchema()
decision_duplicate_schema = DecisionDuplicateSchema()
decision_read_schema = DecisionReadSchema()
decision_read_many_schema = DecisionReadSchema(many=True)
member_read_schema = MemberReadSchema()


@decisions_bp.post("/")
@jwt_required()
@swag_from({
    "tags": ["Decisions"],
    "summary": "Create a decision; the caller becomes its organizer",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "example": "Friday dinner"},
                "lock_time": {"type": "string", "example": "2026-11-01T18:00:00Z"},
                "voting_mechanism": {"type": "string", "example": "point_allocation"},
                "max_options": {"type": "integer", "example": 7},
                "option_submission": {"type": "string", "example": "anyone"},
            },
            "required": ["title", "lock_time"],
        },
    }],
    "responses": {201: {"description": "Created"}, 400: {"description": "Validation error"}},
})
def create_decision():
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(decision_create_schema, payload)

    user_id = current_user_id()
    decision = decisions_engine.create_decision(user_id, payload.pop("title"), payload.pop("lock_time"), **payload)
    current_app.logger.info("Decision created id=%s by=%s", decision.id, user_id)
    return {"decision": decision_read_schema.dump(decision)}, 201


@decisions_bp.get("/")
@jwt_required()
@swag_from({
    "tags": ["Decisions"],
    "summary": "List the decisions the caller belongs to, newest first",
    "responses": {200: {"description": "OK"}, 401: {"description": "Unauthorized"}},
})
def list_decisions():
    decisions = decisions_engine.decisions_for_user(current_user_id())
    return {"decisions": decision_read_many_schema.dump(decisions)}, 200


@decisions_bp.get("/<uuid:decision_id>")
@jwt_required()
@swag_from({
    "tags": ["Decisions"],
    "summary": "Decision detail with the caller's membership and allowed actions",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def get_decision(decision_id):
    decision, member = load_for_member(decision_id, current_user_id())
    return {
        "decision": decision_read_schema.dump(decision),
        "membership": member_read_schema.dump(member),
        "actions": sorted(legal_actions(decision, member)),
    }, 200


@decisions_bp.get("/<uuid:decision_id>/actions")
@jwt_required()
@swag_from({
    "tags": ["Decisions"],
    "summary": "What the caller may do on this decision right now",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def get_actions(decision_id):
    decision, member = load_for_member(decision_id, current_user_id())
    return {"status": decision.status, "actions": sorted(legal_actions(decision, member))}, 200


@decisions_bp.patch("/<uuid:decision_id>")
@jwt_required()
@swag_from({
    "tags": ["Decisions"],
    "summary": "Rename or re-describe a decision (organizer, before lock)",
    "responses": {
        200: {"description": "OK"},
        400: {"description": "Validation error"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def update_decision(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(decision_update_schema, payload)

    decision = decisions_engine.rename_decision(decision_id, current_user_id(), **payload)
    return {"decision": decision_read_schema.dump(decision)}, 200


@decisions_bp.delete("/<uuid:decision_id>")
@jwt_required()
@swag_from({
    "tags": ["Decisions"],
    "summary": "Delete a decision and everything in it (organizer)",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def delete_decision(decision_id):
    decisions_engine.delete_decision(decision_id, current_user_id())
    return {"message": "Decision deleted", "status": "deleted"}, 200


@decisions_bp.post("/<uuid:decision_id>/duplicate")
@jwt_required()
@swag_from({
    "tags": ["Decisions"],
    "summary": "Start a new decision from this one's settings and constraints",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "lock_time": {"type": "string", "example": "2026-11-08T18:00:00Z"},
                "title": {"type": "string", "example": "Friday dinner, again"},
            },
            "required": ["lock_time"],
        },
    }],
    "responses": {
        201: {"description": "Created"},
        400: {"description": "Validation error"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def duplicate_decision(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(decision_duplicate_schema, payload)

    decision = decisions_engine.duplicate_decision(
        decision_id, current_user_id(), payload["lock_time"], title=payload.get("title")
    )
    return {"decision": decision_read_schema.dump(decision)}, 201
