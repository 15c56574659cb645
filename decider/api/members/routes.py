from flask import Blueprint, request, current_app
from flasgger import swag_from
from flask_jwt_extended import jwt_required

from ...engine import membership
from ...schemas.decision import DecisionReadSchema
from ...schemas.member import JoinSchema, TransferOrganizerSchema, MemberReadSchema
from ...utils.identity import current_user_id
from ...utils.validation import validate_or_abort
from ..common import load_for_member

members_bp = Blueprint("members", __name__)

join_schema = JoinSchema()
transfer_schema = TransferOrganizerSchema()
member_read_schema = MemberReadSchema()
member_read_many_schema = MemberReadSchema(many=True)
decision_read_schema = DecisionReadSchema()


@members_bp.post("/join")
@jwt_required()
@swag_from({
    "tags": ["Members"],
    "summary": "Join a decision by invite code (joining twice is a no-op)",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {"invite_code": {"type": "string", "example": "FRD7KX"}},
            "required": ["invite_code"],
        },
    }],
    "responses": {200: {"description": "Already a member"}, 201: {"description": "Joined"},
                  403: {"description": "Participant limit reached"}, 404: {"description": "Unknown code"}},
})
def join_decision():
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(join_schema, payload)

    decision, member, created = membership.join_by_invite_code(payload["invite_code"], current_user_id())
    return {
        "decision": decision_read_schema.dump(decision),
        "membership": member_read_schema.dump(member),
    }, 201 if created else 200


@members_bp.post("/<uuid:decision_id>/leave")
@jwt_required()
@swag_from({
    "tags": ["Members"],
    "summary": "Leave a decision (the organizer must transfer the role first)",
    "responses": {
        200: {"description": "OK"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def leave_decision(decision_id):
    membership.leave_decision(decision_id, current_user_id())
    return {"message": "Left decision"}, 200


@members_bp.get("/<uuid:decision_id>/members")
@jwt_required()
@swag_from({
    "tags": ["Members"],
    "summary": "List members; with silent voting, others' vote status is hidden until lock",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def list_members(decision_id):
    user_id = current_user_id()
    decision, me = load_for_member(decision_id, user_id)

    hide_status = decision.silent_voting and not decision.is_locked() and not me.is_organizer()
    members = member_read_many_schema.dump(decision.members)
    if hide_status:
        for row in members:
            if row["user_id"] != str(user_id):
                row["has_voted"] = None
    return {"members": members}, 200


@members_bp.delete("/<uuid:decision_id>/members/<uuid:user_id>")
@jwt_required()
@swag_from({
    "tags": ["Members"],
    "summary": "Remove a member (organizer); their cast votes are kept",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def remove_member(decision_id, user_id):
    actor_id = current_user_id()
    membership.remove_member(decision_id, actor_id, user_id)
    current_app.logger.info("Member removed decision=%s user=%s by=%s", decision_id, user_id, actor_id)
    return {"message": "Member removed"}, 200


@members_bp.post("/<uuid:decision_id>/organizer")
@jwt_required()
@swag_from({
    "tags": ["Members"],
    "summary": "Transfer the organizer role to another member",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {"type": "object", "properties": {"user_id": {"type": "string"}}, "required": ["user_id"]},
    }],
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def transfer_organizer(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(transfer_schema, payload)

    member = membership.transfer_organizer(decision_id, current_user_id(), payload["user_id"])
    return {"organizer": member_read_schema.dump(member)}, 200
