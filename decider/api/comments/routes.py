from flask import Blueprint, request
from flasgger import swag_from
from flask_jwt_extended import jwt_required
from marshmallow import Schema, fields

from ...engine.comments import add_comment, comment_threads, remove_comment
from ...schemas.comment import CommentCreateSchema, CommentNodeSchema, CommentReadSchema
from ...utils.identity import current_user_id
from ...utils.validation import validate_or_abort
from ..common import load_for_member

comments_bp = Blueprint("comments", __name__)

comment_create_schema = CommentCreateSchema()
comment_read_schema = CommentReadSchema()
comment_tree_schema = CommentNodeSchema(many=True)


class _CommentFilterSchema(Schema):
    option_id = fields.UUID(required=False)
    constraint_id = fields.UUID(required=False)


comment_filter_schema = _CommentFilterSchema()


@comments_bp.get("/<uuid:decision_id>/comments")
@jwt_required()
@swag_from({
    "tags": ["Comments"],
    "summary": "Comment threads, optionally for one option or constraint",
    "parameters": [
        {"in": "query", "name": "option_id", "type": "string", "required": False},
        {"in": "query", "name": "constraint_id", "type": "string", "required": False},
    ],
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def list_comments(decision_id):
    load_for_member(decision_id, current_user_id())
    filters = validate_or_abort(comment_filter_schema, request.args.to_dict())
    threads = comment_threads(decision_id, **filters)
    return {"comments": comment_tree_schema.dump(threads)}, 200


@comments_bp.post("/<uuid:decision_id>/comments")
@jwt_required()
@swag_from({
    "tags": ["Comments"],
    "summary": "Comment on an option or a constraint, or reply to a comment",
    "parameters": [{
        "in": "body",
        "name": "body",
        "required": True,
        "schema": {
            "type": "object",
            "properties": {
                "body": {"type": "string", "example": "Too far for me"},
                "option_id": {"type": "string"},
                "constraint_id": {"type": "string"},
                "parent_id": {"type": "string"},
            },
            "required": ["body"],
        },
    }],
    "responses": {
        201: {"description": "Created"},
        400: {"description": "Validation error"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def create_comment(decision_id):
    payload = request.get_json(silent=True) or {}
    payload = validate_or_abort(comment_create_schema, payload)

    comment = add_comment(
        decision_id,
        current_user_id(),
        payload["body"],
        option_id=payload.get("option_id"),
        constraint_id=payload.get("constraint_id"),
        parent_id=payload.get("parent_id"),
    )
    return {"comment": comment_read_schema.dump(comment)}, 201


@comments_bp.delete("/<uuid:decision_id>/comments/<uuid:comment_id>")
@jwt_required()
@swag_from({
    "tags": ["Comments"],
    "summary": "Remove a comment and its replies (author or organizer)",
    "responses": {
        200: {"description": "OK"},
        403: {"description": "Forbidden"},
        404: {"description": "Not found"},
    },
})
def delete_comment(decision_id, comment_id):
    remove_comment(decision_id, comment_id, current_user_id())
    return {"message": "Comment removed"}, 200
