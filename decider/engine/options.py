from __future__ import annotations

import logging

from sqlalchemy import func, select

from ..extensions import db
from ..exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..models import Constraint, Option
from ..utils.audit import audit_log
from .access import find_member
from .advance_votes import maybe_auto_advance
from .lifecycle import ensure_allowed
from .transaction import load_decision_for_update, unit_of_work
from .validator import Rule, draft_from, parse_metadata, validate

logger = logging.getLogger(__name__)


def _clean_title(title) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Option title is required", {"title": ["Missing data for required field."]})
    if len(title) > 200:
        raise ValidationError("Option title is too long", {"title": ["Longer than maximum length 200."]})
    return title


def rules_for(decision) -> list[Rule]:
    constraints = db.session.execute(
        select(Constraint).where(Constraint.decision_id == decision.id).order_by(Constraint.created_at)
    ).scalars()
    return [Rule(constraint_id=str(c.id), criterion=c.criterion()) for c in constraints]


def submit_option(decision_id, user_id, title: str, description: str | None = None, metadata=None) -> Option:
    """Add a candidate and freeze its constraint verdict.

    Options that fail are stored anyway; they are left off the ballot.
    """
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("submit_option", decision, find_member(decision, user_id))

        title = _clean_title(title)
        description = (description or "").strip() or None
        details = parse_metadata(metadata)
        verdict = validate(draft_from(title, description, details), rules_for(decision))

        position = db.session.execute(
            select(func.coalesce(func.max(Option.position), 0)).where(Option.decision_id == decision.id)
        ).scalar_one() + 1

        option = Option(
            decision_id=decision.id,
            submitted_by=user_id,
            position=position,
            title=title,
            description=description,
            details=details or None,
            passes_constraints=verdict.passes,
            constraint_violations=verdict.violations_list(),
        )
        db.session.add(option)
        db.session.flush()
        db.session.expire(decision, ["options"])

        audit_log(
            action="OPTION_SUBMITTED",
            entity_type="OPTION",
            entity_id=option.id,
            decision_id=decision.id,
            actor_user_id=user_id,
            details={"title": option.title, "passes_constraints": verdict.passes},
        )
        logger.info(
            "Option %s submitted to decision %s passes=%s", option.id, decision.id, verdict.passes,
        )
        # A held options consensus may only have been waiting for this option
        maybe_auto_advance(decision, user_id)
    return option


def remove_option(decision_id, option_id, user_id) -> None:
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        member = find_member(decision, user_id)
        ensure_allowed("remove_option", decision, member)

        option = db.session.get(Option, option_id)
        if option is None or option.decision_id != decision.id:
            raise NotFoundError("Option not found", {"option_id": str(option_id)})
        if option.submitted_by != user_id and not member.is_organizer():
            raise PermissionDeniedError("Only the submitter or the organizer can remove an option")

        audit_log(
            action="OPTION_REMOVED",
            entity_type="OPTION",
            entity_id=option.id,
            decision_id=decision.id,
            actor_user_id=user_id,
            details={"title": option.title},
        )
        db.session.delete(option)


def eligible_options(decision) -> list[Option]:
    """Options on the ballot: those that passed their constraints, in submission order."""
    return list(
        db.session.execute(
            select(Option)
            .where(Option.decision_id == decision.id, Option.passes_constraints.is_(True))
            .order_by(Option.position)
        ).scalars()
    )
