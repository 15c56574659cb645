"""Ballot submission.

A ballot is all of one voter's lines for a decision, accepted or rejected
as a whole:

- point allocation: non-negative integers over eligible options summing
  to exactly the point budget (10 unless configured otherwise);
- forced ranking: every eligible option exactly once, ranks 1..N.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Mapping, Sequence

from flask import current_app
from sqlalchemy import update

from ..extensions import db
from ..exceptions import ConflictError, ValidationError
from ..models import Decision, Member, Vote
from ..utils.audit import audit_log
from .access import find_member
from .lifecycle import ensure_allowed
from .options import eligible_options
from .transaction import load_decision_for_update, unit_of_work

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_ballot(
    mechanism: str,
    eligible_ids: Sequence,
    lines: Iterable[Mapping],
    point_budget: int = 10,
) -> list[tuple]:
    """Check a ballot's shape and return the (option_id, value) pairs to store."""
    lines = list(lines)
    if not lines:
        raise ValidationError("A ballot needs at least one line", {"votes": ["Must not be empty."]})

    eligible = set(eligible_ids)
    option_ids = [line["option_id"] for line in lines]
    values = [line["value"] for line in lines]

    duplicates = sorted(str(oid) for oid, n in Counter(option_ids).items() if n > 1)
    if duplicates:
        raise ValidationError("Each option may appear only once", {"duplicate_option_ids": duplicates})
    unknown = sorted(str(oid) for oid in option_ids if oid not in eligible)
    if unknown:
        raise ValidationError("Ballot names options that are not on the ballot", {"ineligible_option_ids": unknown})
    if not all(_is_int(v) for v in values):
        raise ValidationError("Ballot values must be integers", {"values": ["Not a valid integer."]})

    if mechanism == Decision.MECHANISM_POINTS:
        if any(v < 0 for v in values):
            raise ValidationError("Points must not be negative", {"values": ["Must be >= 0."]})
        total = sum(values)
        if total != point_budget:
            raise ValidationError(
                f"Points must add up to exactly {point_budget}, got {total}",
                {"total": total, "expected": point_budget},
            )
        # Zero-point lines carry no information
        return [(oid, v) for oid, v in zip(option_ids, values) if v > 0]

    if mechanism == Decision.MECHANISM_RANKING:
        missing = sorted(str(oid) for oid in eligible if oid not in set(option_ids))
        if missing:
            raise ValidationError("Every option on the ballot must be ranked", {"missing_option_ids": missing})
        n = len(eligible)
        if sorted(values) != list(range(1, n + 1)):
            raise ValidationError(
                f"Ranks must be each of 1..{n} exactly once",
                {"ranks": sorted(values), "expected": list(range(1, n + 1))},
            )
        return list(zip(option_ids, values))

    raise ValidationError(f"Unknown voting mechanism: {mechanism}")


def submit_ballot(decision_id, user_id, lines: Iterable[Mapping]) -> list[Vote]:
    """Store a voter's whole ballot and mark them as having voted, atomically.

    A ballot that lands after lock_time but before the sweep has locked
    the decision is still accepted; once the decision is locked the phase
    gate rejects it.
    """
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        member = find_member(decision, user_id)
        ensure_allowed("submit_ballot", decision, member)

        budget = current_app.config.get("POINT_BUDGET", 10)
        eligible_ids = [o.id for o in eligible_options(decision)]
        accepted = validate_ballot(decision.voting_mechanism, eligible_ids, lines, point_budget=budget)

        # Check-and-set in one statement so a concurrent duplicate ballot loses
        flipped = db.session.execute(
            update(Member)
            .where(Member.id == member.id, Member.has_voted.is_(False))
            .values(has_voted=True)
            .execution_options(synchronize_session="evaluate")
        ).rowcount
        if flipped != 1:
            raise ConflictError("You have already voted on this decision")

        votes = [
            Vote(decision_id=decision.id, user_id=user_id, option_id=option_id, value=value)
            for option_id, value in accepted
        ]
        db.session.add_all(votes)
        db.session.flush()

        audit_log(
            action="BALLOT_SUBMITTED",
            entity_type="BALLOT",
            decision_id=decision.id,
            actor_user_id=user_id,
            details={"mechanism": decision.voting_mechanism, "lines": len(votes)},
        )
        logger.info("Ballot with %d lines recorded for user %s on decision %s", len(votes), user_id, decision.id)
    return votes
