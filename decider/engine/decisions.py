"""Creating, renaming, duplicating and deleting decisions."""

from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy import select

from ..extensions import db
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models import Constraint, Decision, Member
from ..utils.audit import audit_log
from ..utils.invite_code import generate_invite_code, normalize_invite_code
from .access import find_member, require_member
from .clock import get_clock
from .lifecycle import ensure_allowed
from .transaction import get_decision, load_decision_for_update, unit_of_work

logger = logging.getLogger(__name__)

_INVITE_CODE_ATTEMPTS = 10


def _unique_invite_code() -> str:
    length = current_app.config.get("INVITE_CODE_LENGTH", 6)
    for _ in range(_INVITE_CODE_ATTEMPTS):
        code = generate_invite_code(length)
        taken = db.session.execute(select(Decision.id).filter_by(invite_code=code)).first()
        if taken is None:
            return code
    raise ConflictError("Could not allocate a unique invite code")


def _clean_title(title) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required", {"title": ["Missing data for required field."]})
    if len(title) > 200:
        raise ValidationError("Title is too long", {"title": ["Longer than maximum length 200."]})
    return title


def _check_config(lock_time, voting_mechanism, max_options, option_submission) -> None:
    errors = {}
    if lock_time is None or lock_time <= get_clock().now():
        errors["lock_time"] = ["Lock time must be in the future."]
    if voting_mechanism not in Decision.VALID_MECHANISMS:
        errors["voting_mechanism"] = [f"Must be one of: {', '.join(Decision.VALID_MECHANISMS)}."]
    if option_submission not in Decision.VALID_SUBMISSION_MODES:
        errors["option_submission"] = [f"Must be one of: {', '.join(Decision.VALID_SUBMISSION_MODES)}."]
    limit = current_app.config.get("MAX_OPTIONS_LIMIT", 20)
    if not isinstance(max_options, int) or isinstance(max_options, bool) or not 2 <= max_options <= limit:
        errors["max_options"] = [f"Must be between 2 and {limit}."]
    if errors:
        raise ValidationError("Invalid decision settings", errors)


def _new_decision(
    creator_id,
    title: str,
    lock_time,
    description: str | None = None,
    type_label: str | None = None,
    voting_mechanism: str = Decision.MECHANISM_POINTS,
    max_options: int | None = None,
    option_submission: str = Decision.SUBMISSION_ANYONE,
    reveal_votes_after_lock: bool = False,
    silent_voting: bool = False,
    constraint_weighting_enabled: bool = False,
) -> Decision:
    """Validate and stage a decision plus its organizer row. Caller owns the transaction."""
    title = _clean_title(title)
    if max_options is None:
        max_options = current_app.config.get("DEFAULT_MAX_OPTIONS", 7)
    _check_config(lock_time, voting_mechanism, max_options, option_submission)

    now = get_clock().now()
    decision = Decision(
        title=title,
        description=(description or "").strip() or None,
        type_label=type_label or None,
        created_by=creator_id,
        lock_time=lock_time,
        status=Decision.STATUS_CONSTRAINTS,
        voting_mechanism=voting_mechanism,
        max_options=max_options,
        option_submission=option_submission,
        reveal_votes_after_lock=reveal_votes_after_lock,
        silent_voting=silent_voting,
        constraint_weighting_enabled=constraint_weighting_enabled,
        invite_code=_unique_invite_code(),
        created_at=now,
        updated_at=now,
    )
    db.session.add(decision)
    db.session.flush()

    db.session.add(Member(decision_id=decision.id, user_id=creator_id, role=Member.ROLE_ORGANIZER))

    audit_log(
        action="DECISION_CREATED",
        entity_type="DECISION",
        entity_id=decision.id,
        decision_id=decision.id,
        actor_user_id=creator_id,
        details={"title": decision.title, "mechanism": voting_mechanism},
    )
    return decision


def create_decision(creator_id, title: str, lock_time, **settings) -> Decision:
    """Create a decision in the constraints phase with ``creator_id`` as its organizer.

    ``settings`` are the optional keyword arguments of ``_new_decision``.
    """
    with unit_of_work():
        decision = _new_decision(creator_id, title, lock_time, **settings)
    logger.info("Decision %s created by %s", decision.id, creator_id)
    return decision


def rename_decision(decision_id, actor_id, title: str | None = None, description=None, type_label=None) -> Decision:
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("rename", decision, find_member(decision, actor_id))

        changed = []
        if title is not None:
            decision.title = _clean_title(title)
            changed.append("title")
        if description is not None:
            decision.description = description.strip() or None
            changed.append("description")
        if type_label is not None:
            decision.type_label = type_label or None
            changed.append("type_label")
        decision.updated_at = get_clock().now()

        audit_log(
            action="DECISION_RENAMED",
            entity_type="DECISION",
            entity_id=decision.id,
            decision_id=decision.id,
            actor_user_id=actor_id,
            details={"updated_fields": changed},
        )
    return decision


def delete_decision(decision_id, actor_id) -> None:
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("delete", decision, find_member(decision, actor_id))

        audit_log(
            action="DECISION_DELETED",
            entity_type="DECISION",
            entity_id=decision.id,
            decision_id=decision.id,
            actor_user_id=actor_id,
            details={"title": decision.title, "status": decision.status},
        )
        db.session.delete(decision)
        logger.info("Decision %s deleted by %s", decision_id, actor_id)


def duplicate_decision(source_id, actor_id, lock_time, title: str | None = None) -> Decision:
    """Start a fresh decision from an existing one's settings and constraints."""
    source = get_decision(source_id)
    require_member(source, actor_id)
    copied = [(c.type, dict(c.value), c.weight) for c in source.constraints]

    with unit_of_work():
        decision = _new_decision(
            actor_id,
            title if title is not None else source.title,
            lock_time,
            description=source.description,
            type_label=source.type_label,
            voting_mechanism=source.voting_mechanism,
            max_options=source.max_options,
            option_submission=source.option_submission,
            reveal_votes_after_lock=source.reveal_votes_after_lock,
            silent_voting=source.silent_voting,
            constraint_weighting_enabled=source.constraint_weighting_enabled,
        )
        for constraint_type, value, weight in copied:
            db.session.add(Constraint(
                decision_id=decision.id,
                user_id=actor_id,
                type=constraint_type,
                value=value,
                weight=weight if decision.constraint_weighting_enabled else None,
            ))
        audit_log(
            action="DECISION_DUPLICATED",
            entity_type="DECISION",
            entity_id=decision.id,
            decision_id=decision.id,
            actor_user_id=actor_id,
            details={"source_decision_id": str(source_id), "constraints_copied": len(copied)},
        )
    return decision


def find_by_invite_code(code: str) -> Decision:
    normalized = normalize_invite_code(code)
    decision = db.session.execute(
        select(Decision).filter_by(invite_code=normalized)
    ).scalar_one_or_none()
    if decision is None:
        raise NotFoundError("No decision matches that invite code")
    return decision


def decisions_for_user(user_id) -> list[Decision]:
    return list(
        db.session.execute(
            select(Decision)
            .join(Member, Member.decision_id == Decision.id)
            .where(Member.user_id == user_id)
            .order_by(Decision.created_at.desc())
        ).scalars()
    )
