"""Who belongs to a decision and who organizes it.

There is exactly one organizer per decision at all times: the role moves
only through ``transfer_organizer``, and the organizer cannot leave or be
removed while holding it.
"""

from __future__ import annotations

import logging

from flask import current_app
from sqlalchemy import delete, func, select

from ..extensions import db
from ..exceptions import IllegalTransitionError, NotFoundError, PolicyRejectedError
from ..models import AdvanceVote, Decision, Member
from ..utils.audit import audit_log
from .access import find_member, organizer_of
from .advance_votes import maybe_auto_advance
from .clock import get_clock
from .lifecycle import ensure_allowed
from .transaction import load_decision_for_update, unit_of_work

logger = logging.getLogger(__name__)


class ParticipantLimitPolicy:
    """Caps the number of members per decision; ``None`` means no cap."""

    def __init__(self, max_participants: int | None = None):
        self.max_participants = max_participants

    def check(self, decision: Decision, current_count: int) -> None:
        if self.max_participants is not None and current_count >= self.max_participants:
            raise PolicyRejectedError(
                f"This decision has reached the participant limit ({self.max_participants})",
                {"limit": self.max_participants, "current": current_count},
            )


def init_participant_policy(app, policy: ParticipantLimitPolicy | None = None) -> None:
    app.extensions["decider_participant_policy"] = policy or ParticipantLimitPolicy(
        app.config.get("MAX_PARTICIPANTS")
    )


def _policy() -> ParticipantLimitPolicy:
    return current_app.extensions["decider_participant_policy"]


def _drop_advance_votes(decision: Decision, user_id) -> None:
    db.session.execute(
        delete(AdvanceVote)
        .where(AdvanceVote.decision_id == decision.id, AdvanceVote.user_id == user_id)
        .execution_options(synchronize_session="evaluate")
    )


def join_decision(decision_id, user_id) -> tuple[Member, bool]:
    """Add ``user_id`` as a member. Returns (member, created); joining twice returns the existing row."""
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        existing = find_member(decision, user_id)
        if existing is not None:
            return existing, False

        count = db.session.execute(
            select(func.count(Member.id)).where(Member.decision_id == decision.id)
        ).scalar_one()
        _policy().check(decision, count)

        member = Member(decision_id=decision.id, user_id=user_id, role=Member.ROLE_MEMBER)
        db.session.add(member)
        db.session.flush()

        audit_log(
            action="MEMBER_JOINED",
            entity_type="MEMBER",
            entity_id=member.id,
            decision_id=decision.id,
            actor_user_id=user_id,
        )
        logger.info("User %s joined decision %s", user_id, decision.id)
    return member, True


def join_by_invite_code(code: str, user_id) -> tuple[Decision, Member, bool]:
    from .decisions import find_by_invite_code

    decision = find_by_invite_code(code)
    member, created = join_decision(decision.id, user_id)
    return decision, member, created


def _depart(decision: Decision, member: Member, actor_id, action: str) -> None:
    user_id, member_id = member.user_id, member.id
    db.session.delete(member)
    _drop_advance_votes(decision, user_id)
    db.session.flush()
    db.session.expire(decision, ["members"])

    audit_log(
        action=action,
        entity_type="MEMBER",
        entity_id=member_id,
        decision_id=decision.id,
        actor_user_id=actor_id,
        details={"user_id": str(user_id)},
    )
    # Fewer members can mean the remaining advance votes are now a majority
    maybe_auto_advance(decision, actor_id)


def leave_decision(decision_id, user_id) -> None:
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        member = find_member(decision, user_id)
        if member is None:
            raise NotFoundError("You are not a member of this decision")
        ensure_allowed("leave", decision, member)
        _depart(decision, member, user_id, "MEMBER_LEFT")
        logger.info("User %s left decision %s", user_id, decision.id)


def remove_member(decision_id, actor_id, target_user_id) -> None:
    """Organizer removes someone else. Their already cast votes stay."""
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("manage_members", decision, find_member(decision, actor_id))
        if target_user_id == actor_id:
            raise IllegalTransitionError("The organizer cannot remove themselves; transfer the role first")
        target = find_member(decision, target_user_id)
        if target is None:
            raise NotFoundError("Member not found", {"user_id": str(target_user_id)})
        _depart(decision, target, actor_id, "MEMBER_REMOVED")
        logger.info("User %s removed %s from decision %s", actor_id, target_user_id, decision.id)


def transfer_organizer(decision_id, actor_id, new_organizer_id) -> Member:
    """Hand the organizer role to another member in one transaction."""
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        current = find_member(decision, actor_id)
        ensure_allowed("manage_members", decision, current)
        if new_organizer_id == actor_id:
            raise IllegalTransitionError("You are already the organizer")
        target = find_member(decision, new_organizer_id)
        if target is None:
            raise NotFoundError("Member not found", {"user_id": str(new_organizer_id)})

        current.role = Member.ROLE_MEMBER
        target.role = Member.ROLE_ORGANIZER
        decision.created_by = target.user_id
        decision.updated_at = get_clock().now()
        db.session.flush()

        if organizer_of(decision) is not target:
            raise IllegalTransitionError("Organizer transfer left the decision without a single organizer")

        audit_log(
            action="ORGANIZER_TRANSFERRED",
            entity_type="DECISION",
            entity_id=decision.id,
            decision_id=decision.id,
            actor_user_id=actor_id,
            details={"from": str(actor_id), "to": str(new_organizer_id)},
        )
        logger.info("Decision %s organizer %s -> %s", decision.id, actor_id, new_organizer_id)
    return target
