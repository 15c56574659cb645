"""Phase state machine for a decision.

    constraints -> options -> voting -> locked
    options -> constraints   (organizer revert, deletes options)
    voting  -> options       (organizer revert, deletes ballots)

Nothing else is legal. Forward moves come from the organizer or from
advance-vote consensus; ``voting -> locked`` only from the deadline sweep.
``legal_actions`` answers what a member may do right now, and every gate
in the engine goes through the same rules via ``ensure_allowed``.
"""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy import delete, select, update

from ..extensions import db
from ..exceptions import (
    DecisionError,
    IllegalTransitionError,
    PermissionDeniedError,
    ConflictError,
    ValidationError,
)
from ..models import AdvanceVote, Comment, Decision, Member, Option, Result, Vote
from ..utils.audit import audit_log
from .access import find_member
from .clock import get_clock
from .tally import tally
from .transaction import compare_and_set_status, load_decision_for_update, unit_of_work

logger = logging.getLogger(__name__)

C, O, V, L = Decision.STATUS_CONSTRAINTS, Decision.STATUS_OPTIONS, Decision.STATUS_VOTING, Decision.STATUS_LOCKED

FORWARD = {C: O, O: V, V: L}
REVERT = {O: C, V: O}
MIN_OPTIONS_FOR_VOTING = 2


# ---- Action rules ----

def _organizer_only(member: Member, what: str) -> DecisionError | None:
    if not member.is_organizer():
        return PermissionDeniedError(f"Only the organizer can {what}")
    return None


def _rule_add_constraint(d: Decision, m: Member):
    if d.status not in (C, O):
        return IllegalTransitionError("Constraints can only be changed before voting starts")
    return None


def _rule_submit_option(d: Decision, m: Member):
    if d.status != O:
        return IllegalTransitionError("Options can only be submitted during the options phase")
    if d.option_submission == Decision.SUBMISSION_ORGANIZER and not m.is_organizer():
        return PermissionDeniedError("Only the organizer can submit options to this decision")
    if len(d.options) >= d.max_options:
        return IllegalTransitionError(f"This decision already has the maximum of {d.max_options} options")
    return None


def _rule_remove_option(d: Decision, m: Member):
    if d.status != O:
        return IllegalTransitionError("Options can only be removed during the options phase")
    return None


def _rule_submit_ballot(d: Decision, m: Member):
    if d.status != V:
        return IllegalTransitionError("Ballots can only be submitted during the voting phase")
    if m.has_voted:
        return ConflictError("You have already voted on this decision")
    return None


def _rule_advance_vote(d: Decision, m: Member):
    if d.status not in (C, O):
        return IllegalTransitionError(f"There is no advance vote in the {d.status} phase")
    return None


def _rule_advance_phase(d: Decision, m: Member):
    err = _organizer_only(m, "advance the phase")
    if err:
        return err
    if d.status not in (C, O):
        return IllegalTransitionError(f"A decision in the {d.status} phase cannot be advanced manually")
    if d.status == O and len(d.options) < MIN_OPTIONS_FOR_VOTING:
        return IllegalTransitionError(
            f"Voting needs at least {MIN_OPTIONS_FOR_VOTING} options, this decision has {len(d.options)}"
        )
    return None


def _rule_revert_phase(d: Decision, m: Member):
    err = _organizer_only(m, "revert the phase")
    if err:
        return err
    if d.status not in REVERT:
        return IllegalTransitionError(f"A decision in the {d.status} phase cannot be reverted")
    return None


def _rule_rename(d: Decision, m: Member):
    err = _organizer_only(m, "rename the decision")
    if err:
        return err
    if d.is_locked():
        return IllegalTransitionError("A locked decision cannot be renamed")
    return None


def _rule_leave(d: Decision, m: Member):
    if m.is_organizer():
        return IllegalTransitionError("The organizer must transfer the role before leaving")
    return None


def _rule_view_results(d: Decision, m: Member):
    if not d.is_locked():
        return IllegalTransitionError("Results are available once the decision locks")
    return None


def _rule_view_votes(d: Decision, m: Member):
    if not d.is_locked():
        return IllegalTransitionError("Individual votes are hidden until the decision locks")
    if not d.reveal_votes_after_lock:
        return PermissionDeniedError("This decision does not reveal individual votes")
    return None


_RULES: dict[str, Callable[[Decision, Member], DecisionError | None]] = {
    "add_constraint": _rule_add_constraint,
    "remove_own_constraint": _rule_add_constraint,
    "submit_option": _rule_submit_option,
    "remove_option": _rule_remove_option,
    "submit_ballot": _rule_submit_ballot,
    "advance_vote": _rule_advance_vote,
    "advance_phase": _rule_advance_phase,
    "revert_phase": _rule_revert_phase,
    "rename": _rule_rename,
    "delete": lambda d, m: _organizer_only(m, "delete the decision"),
    "manage_members": lambda d, m: _organizer_only(m, "manage members"),
    "leave": _rule_leave,
    "comment": lambda d, m: None,
    "view_results": _rule_view_results,
    "view_votes": _rule_view_votes,
}

ACTIONS = tuple(_RULES)


def check_action(action: str, decision: Decision, member: Member | None) -> DecisionError | None:
    if member is None:
        return PermissionDeniedError("You are not a member of this decision")
    return _RULES[action](decision, member)


def legal_actions(decision: Decision, member: Member | None) -> frozenset[str]:
    if member is None:
        return frozenset()
    return frozenset(a for a in ACTIONS if _RULES[a](decision, member) is None)


def ensure_allowed(action: str, decision: Decision, member: Member | None) -> None:
    err = check_action(action, decision, member)
    if err is not None:
        logger.info(
            "Rejected %s on decision=%s user=%s: %s",
            action, decision.id, getattr(member, "user_id", None), err.message,
        )
        raise err


# ---- Transitions ----

def _checked_lock_time(lock_time):
    if lock_time is None:
        return {}
    if lock_time <= get_clock().now():
        raise ValidationError("Lock time must be in the future", {"lock_time": ["Must be in the future."]})
    return {"lock_time": lock_time}


def _clear_advance_votes(decision: Decision, from_phase: str) -> int:
    result = db.session.execute(
        delete(AdvanceVote)
        .where(AdvanceVote.decision_id == decision.id, AdvanceVote.from_phase == from_phase)
        .execution_options(synchronize_session="evaluate")
    )
    return result.rowcount


def apply_advance(decision: Decision, actor_id, via: str, lock_time=None) -> None:
    """Move one phase forward. Caller owns the transaction."""
    from_status = decision.status
    to_status = FORWARD.get(from_status)
    if to_status is None or to_status == L:
        raise IllegalTransitionError(f"A decision in the {from_status} phase cannot be advanced")
    if from_status == O and len(decision.options) < MIN_OPTIONS_FOR_VOTING:
        raise IllegalTransitionError(
            f"Voting needs at least {MIN_OPTIONS_FOR_VOTING} options, this decision has {len(decision.options)}"
        )
    extra = _checked_lock_time(lock_time)

    compare_and_set_status(decision, from_status, to_status, updated_at=get_clock().now(), **extra)
    cleared = _clear_advance_votes(decision, from_status)

    audit_log(
        action="PHASE_ADVANCED",
        entity_type="DECISION",
        entity_id=decision.id,
        decision_id=decision.id,
        actor_user_id=actor_id,
        details={"from": from_status, "to": to_status, "via": via, "advance_votes_cleared": cleared},
    )
    logger.info("Decision %s advanced %s -> %s via %s", decision.id, from_status, to_status, via)


def advance_phase(decision_id, actor_id, lock_time=None) -> Decision:
    """Organizer moves the decision forward: constraints -> options -> voting."""
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("advance_phase", decision, find_member(decision, actor_id))
        apply_advance(decision, actor_id, via="organizer", lock_time=lock_time)
    return decision


def revert_phase(decision_id, actor_id, lock_time=None) -> Decision:
    """Organizer moves the decision one phase back, deleting what the later phase produced."""
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("revert_phase", decision, find_member(decision, actor_id))

        from_status = decision.status
        to_status = REVERT[from_status]
        extra = _checked_lock_time(lock_time)

        compare_and_set_status(decision, from_status, to_status, updated_at=get_clock().now(), **extra)

        removed = {}
        removed["results"] = db.session.execute(
            delete(Result).where(Result.decision_id == decision.id).execution_options(synchronize_session="evaluate")
        ).rowcount
        removed["votes"] = db.session.execute(
            delete(Vote).where(Vote.decision_id == decision.id).execution_options(synchronize_session="evaluate")
        ).rowcount
        db.session.execute(
            update(Member)
            .where(Member.decision_id == decision.id)
            .values(has_voted=False)
            .execution_options(synchronize_session="evaluate")
        )

        if from_status == O:
            option_ids = select(Option.id).where(Option.decision_id == decision.id)
            db.session.execute(
                delete(Comment).where(Comment.option_id.in_(option_ids)).execution_options(synchronize_session="fetch")
            )
            removed["options"] = db.session.execute(
                delete(Option).where(Option.decision_id == decision.id).execution_options(synchronize_session="evaluate")
            ).rowcount

        removed["advance_votes"] = _clear_advance_votes(decision, from_status)
        db.session.expire(decision, ["options", "votes", "results", "members", "advance_votes", "comments"])

        audit_log(
            action="PHASE_REVERTED",
            entity_type="DECISION",
            entity_id=decision.id,
            decision_id=decision.id,
            actor_user_id=actor_id,
            details={"from": from_status, "to": to_status, "removed": removed},
        )
        logger.info("Decision %s reverted %s -> %s removed=%s", decision.id, from_status, to_status, removed)
    return decision


def lock_decision(decision: Decision) -> list[Result]:
    """Tally once and lock. Caller owns the transaction.

    The status compare-and-set runs before any Result row is written, so a
    second attempt on an already locked decision fails with ConflictError
    and inserts nothing.
    """
    if decision.status != V:
        raise ConflictError(f"Decision is {decision.status}, not voting", {"decision_id": str(decision.id)})

    now = get_clock().now()
    eligible = db.session.execute(
        select(Option)
        .where(Option.decision_id == decision.id, Option.passes_constraints.is_(True))
        .order_by(Option.position)
    ).scalars().all()
    votes = db.session.execute(select(Vote).where(Vote.decision_id == decision.id)).scalars().all()

    rows = tally(decision.voting_mechanism, [o.id for o in eligible], votes)

    compare_and_set_status(decision, V, L, locked_at=now, updated_at=now)

    results = [
        Result(
            decision_id=decision.id,
            option_id=row.option_id,
            total_points=row.total_points,
            average_rank=row.average_rank,
            rank=row.rank,
            is_winner=row.is_winner,
        )
        for row in rows
    ]
    db.session.add_all(results)

    audit_log(
        action="DECISION_LOCKED",
        entity_type="DECISION",
        entity_id=decision.id,
        decision_id=decision.id,
        details={
            "mechanism": decision.voting_mechanism,
            "eligible_options": len(eligible),
            "ballot_lines": len(votes),
            "winner_option_id": str(rows[0].option_id) if rows else None,
        },
    )
    logger.info("Decision %s locked with %d result rows", decision.id, len(results))
    return results
