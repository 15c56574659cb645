from flask import Blueprint, request
from flasgger import swag_from
from flask_jwt_extended import jwt_required

from ...engine.options import submit_option, remove_option
from ...schemas.option import OptionCreateSchema, OptionReadSchema
from ...utils.identity import current_user_id
from ...utils.validation import validate_or_abort
from ..common import load_for_member

options_bp = Blueprint("options", __name__)

option_create_schema = OptionCreateSchema()
option_read_schema = OptionReadSchema()
option_read_many_schema = OptionReadSchema(many=True)


@options_bp.get("/<uuid:decision_id>/options")
@jwt_required()
@swag_from({
    "tags": ["Options"],
    "summary": "List options in submission order, with their constraint verdicts",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def list_options(decision_id):
    decision, _ = load_for_member(decision_id, current_user_id())
    return {"options": option_read_many_schema.dump(decision.options)}, 200


@options_bp.post("/<uuid:decision_id>/options")
@jwt_required()
@swag_from({
    "tags": ["Options"],
    "summary": "Submit an option; it is checked against the constraints once, now",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "example": "Luigi's"},
                "description": {"type": "string", "example": "Pasta place downtown"},
                "metadata": {"type": "object", "example": {"price": 25, "distance": 3}},
            },
            "required": ["title"],
        },
    }],
    "responses": {
        201: {"description": "Created"},
        400: {"description": "Validation error"},
        403: {"description": "Forbidden"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def create_option(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(option_create_schema, payload)

    option = submit_option(
        decision_id,
        current_user_id(),
        payload["title"],
        description=payload.get("description"),
        metadata=payload.get("metadata"),
    )
    return {"option": option_read_schema.dump(option)}, 201


@options_bp.delete("/<uuid:decision_id>/options/<uuid:option_id>")
@jwt_required()
@swag_from({
    "tags": ["Options"],
    "summary": "Remove an option (submitter or organizer, options phase only)",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
        409: {"description": "Not allowed in the current phase"},
    },
})
def delete_option(decision_id, option_id):
    remove_option(decision_id, option_id, current_user_id())
    return {"message": "Option removed"}, 200
