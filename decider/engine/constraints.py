from __future__ import annotations

import logging

from ..extensions import db
from ..exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..models import Constraint
from ..utils.audit import audit_log
from .access import find_member
from .lifecycle import ensure_allowed
from .transaction import load_decision_for_update, unit_of_work
from .validator import criterion_from_value

logger = logging.getLogger(__name__)

MIN_WEIGHT, MAX_WEIGHT = 1, 5


def _checked_weight(decision, weight):
    if weight is None:
        return None
    if not decision.constraint_weighting_enabled:
        raise ValidationError("Constraint weighting is not enabled for this decision", {"weight": ["Not allowed."]})
    if isinstance(weight, bool) or not isinstance(weight, int) or not MIN_WEIGHT <= weight <= MAX_WEIGHT:
        raise ValidationError(
            f"Weight must be an integer from {MIN_WEIGHT} to {MAX_WEIGHT}",
            {"weight": [f"Must be between {MIN_WEIGHT} and {MAX_WEIGHT}."]},
        )
    return weight


def submit_constraint(decision_id, user_id, constraint_type: str, value, weight=None) -> Constraint:
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("add_constraint", decision, find_member(decision, user_id))

        criterion = criterion_from_value(constraint_type, value)
        constraint = Constraint(
            decision_id=decision.id,
            user_id=user_id,
            type=constraint_type,
            value=criterion.to_value(),
            weight=_checked_weight(decision, weight),
        )
        db.session.add(constraint)
        db.session.flush()

        audit_log(
            action="CONSTRAINT_ADDED",
            entity_type="CONSTRAINT",
            entity_id=constraint.id,
            decision_id=decision.id,
            actor_user_id=user_id,
            details={"type": constraint_type, "value": constraint.value, "weight": constraint.weight},
        )
        logger.info("Constraint %s (%s) added to decision %s", constraint.id, constraint_type, decision.id)
    return constraint


def remove_constraint(decision_id, constraint_id, user_id) -> None:
    """Owners remove their own constraints before voting. Options already stamped keep their verdict."""
    with unit_of_work():
        decision = load_decision_for_update(decision_id)
        ensure_allowed("remove_own_constraint", decision, find_member(decision, user_id))

        constraint = db.session.get(Constraint, constraint_id)
        if constraint is None or constraint.decision_id != decision.id:
            raise NotFoundError("Constraint not found", {"constraint_id": str(constraint_id)})
        if constraint.user_id != user_id:
            raise PermissionDeniedError("Only the member who added a constraint can remove it")

        audit_log(
            action="CONSTRAINT_REMOVED",
            entity_type="CONSTRAINT",
            entity_id=constraint.id,
            decision_id=decision.id,
            actor_user_id=user_id,
            details={"type": constraint.type},
        )
        db.session.delete(constraint)
