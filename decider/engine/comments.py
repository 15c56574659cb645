from __future__ import annotations

import logging

from sqlalchemy import select

from ..extensions import db
from ..exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..models import Comment, Constraint, Option
from ..utils.audit import audit_log
from .access import find_member, require_member
from .comment_tree import CommentNode, build_comment_tree
from .lifecycle import ensure_allowed
from .transaction import get_decision, load_decision_for_update, unit_of_work

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 1000


def add_comment(decision_id, user_id, body: str, option_id=None, constraint_id=None, parent_id=None) -> Comment:
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("comment", decision, find_member(decision, user_id))

        body = (body or "").strip()
        if not body:
            raise ValidationError("Comment must not be empty", {"body": ["Missing data for required field."]})
        if len(body) > MAX_COMMENT_LENGTH:
            raise ValidationError("Comment is too long", {"body": [f"Longer than maximum length {MAX_COMMENT_LENGTH}."]})
        if (option_id is None) == (constraint_id is None):
            raise ValidationError(
                "A comment targets exactly one option or constraint",
                {"target": ["Provide option_id or constraint_id."]},
            )

        target_model, target_id = (Option, option_id) if option_id is not None else (Constraint, constraint_id)
        target = db.session.get(target_model, target_id)
        if target is None or target.decision_id != decision.id:
            raise NotFoundError(f"{target_model.__name__} not found", {"target_id": str(target_id)})

        if parent_id is not None:
            parent = db.session.get(Comment, parent_id)
            if (
                parent is None
                or parent.decision_id != decision.id
                or parent.option_id != option_id
                or parent.constraint_id != constraint_id
            ):
                raise NotFoundError("Parent comment not found on this target", {"parent_id": str(parent_id)})

        comment = Comment(
            decision_id=decision.id,
            user_id=user_id,
            option_id=option_id,
            constraint_id=constraint_id,
            parent_id=parent_id,
            body=body,
        )
        db.session.add(comment)
        db.session.flush()

        audit_log(
            action="COMMENT_ADDED",
            entity_type="COMMENT",
            entity_id=comment.id,
            decision_id=decision.id,
            actor_user_id=user_id,
            details={"option_id": str(option_id) if option_id else None,
                     "constraint_id": str(constraint_id) if constraint_id else None,
                     "reply": parent_id is not None},
        )
    return comment


def remove_comment(decision_id, comment_id, user_id) -> None:
    """Authors and the organizer remove comments; replies go with them."""
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        member = require_member(decision, user_id)

        comment = db.session.get(Comment, comment_id)
        if comment is None or comment.decision_id != decision.id:
            raise NotFoundError("Comment not found", {"comment_id": str(comment_id)})
        if comment.user_id != user_id and not member.is_organizer():
            raise PermissionDeniedError("Only the author or the organizer can remove a comment")

        audit_log(
            action="COMMENT_REMOVED",
            entity_type="COMMENT",
            entity_id=comment.id,
            decision_id=decision.id,
            actor_user_id=user_id,
        )
        db.session.delete(comment)


def comment_threads(decision_id, option_id=None, constraint_id=None) -> list[CommentNode]:
    decision = get_decision(decision_id)
    query = select(Comment).where(Comment.decision_id == decision.id)
    if option_id is not None:
        query = query.where(Comment.option_id == option_id)
    if constraint_id is not None:
        query = query.where(Comment.constraint_id == constraint_id)
    comments = db.session.execute(query.order_by(Comment.created_at)).scalars()
    return build_comment_tree(comments)
