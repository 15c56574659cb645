"""Advance votes: members jointly moving the decision to the next phase.

A strict majority, ``ceil(member_count / 2)`` distinct members, moves
constraints -> options or options -> voting without the organizer. Votes
are tied to the phase they were cast in and are cleared whenever the
decision leaves that phase.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from sqlalchemy import func, select

from ..extensions import db
from ..exceptions import IllegalTransitionError, NotFoundError
from ..models import AdvanceVote, Decision, Member
from ..utils.audit import audit_log
from .access import find_member
from .lifecycle import MIN_OPTIONS_FOR_VOTING, apply_advance, ensure_allowed
from .transaction import get_decision, load_decision_for_update, unit_of_work

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvanceVoteStatus:
    from_phase: str
    voters: list
    member_count: int
    threshold: int
    advanced: bool = False

    @property
    def threshold_reached(self) -> bool:
        return len(self.voters) >= self.threshold


def advance_threshold(member_count: int) -> int:
    return math.ceil(member_count / 2)


def _member_count(decision: Decision) -> int:
    return db.session.execute(
        select(func.count(Member.id)).where(Member.decision_id == decision.id)
    ).scalar_one()


def _voters(decision: Decision, from_phase: str) -> list:
    return list(
        db.session.execute(
            select(AdvanceVote.user_id)
            .where(AdvanceVote.decision_id == decision.id, AdvanceVote.from_phase == from_phase)
            .order_by(AdvanceVote.created_at)
        ).scalars()
    )


def _status(decision: Decision, from_phase: str, advanced: bool = False, voters=None) -> AdvanceVoteStatus:
    members = _member_count(decision)
    return AdvanceVoteStatus(
        from_phase=from_phase,
        voters=voters if voters is not None else _voters(decision, from_phase),
        member_count=members,
        threshold=advance_threshold(members),
        advanced=advanced,
    )


def maybe_auto_advance(decision: Decision, actor_id=None) -> bool:
    """Advance if enough members have asked to. Caller owns the transaction."""
    if decision.status not in (Decision.STATUS_CONSTRAINTS, Decision.STATUS_OPTIONS):
        return False

    voters = _voters(decision, decision.status)
    if len(voters) < advance_threshold(_member_count(decision)):
        return False
    if decision.status == Decision.STATUS_OPTIONS and len(decision.options) < MIN_OPTIONS_FOR_VOTING:
        logger.info(
            "Decision %s reached advance consensus but has %d options; staying in options",
            decision.id, len(decision.options),
        )
        return False

    apply_advance(decision, actor_id, via="consensus")
    return True


def _check_phase(decision: Decision, from_phase: str) -> None:
    if from_phase != decision.status:
        raise IllegalTransitionError(
            f"Decision is in the {decision.status} phase, not {from_phase}",
            {"from_phase": from_phase, "status": decision.status},
        )


def record_advance_vote(decision_id, user_id, from_phase: str) -> AdvanceVoteStatus:
    """Record that ``user_id`` is ready to leave ``from_phase``. Recording twice is a no-op."""
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("advance_vote", decision, find_member(decision, user_id))
        _check_phase(decision, from_phase)

        existing = db.session.execute(
            select(AdvanceVote).filter_by(decision_id=decision.id, from_phase=from_phase, user_id=user_id)
        ).scalar_one_or_none()
        if existing is None:
            db.session.add(AdvanceVote(decision_id=decision.id, from_phase=from_phase, user_id=user_id))
            db.session.flush()
            audit_log(
                action="ADVANCE_VOTE_RECORDED",
                entity_type="ADVANCE_VOTE",
                decision_id=decision.id,
                actor_user_id=user_id,
                details={"from_phase": from_phase},
            )

        voters = _voters(decision, from_phase)
        advanced = maybe_auto_advance(decision, user_id)
        status = _status(decision, from_phase, advanced=advanced, voters=voters)
    return status


def retract_advance_vote(decision_id, user_id, from_phase: str) -> AdvanceVoteStatus:
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("advance_vote", decision, find_member(decision, user_id))
        _check_phase(decision, from_phase)

        existing = db.session.execute(
            select(AdvanceVote).filter_by(decision_id=decision.id, from_phase=from_phase, user_id=user_id)
        ).scalar_one_or_none()
        if existing is None:
            raise NotFoundError("You have not voted to advance this phase")

        db.session.delete(existing)
        db.session.flush()
        audit_log(
            action="ADVANCE_VOTE_RETRACTED",
            entity_type="ADVANCE_VOTE",
            decision_id=decision.id,
            actor_user_id=user_id,
            details={"from_phase": from_phase},
        )
        status = _status(decision, from_phase)
    return status


def count_advance_votes(decision_id, from_phase: str) -> AdvanceVoteStatus:
    decision = get_decision(decision_id)
    return _status(decision, from_phase)
