"""Deadline sweep: lock every voting decision whose lock_time has passed.

Safe to run as often as you like; a decision is tallied at most once.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from ..extensions import db
from ..exceptions import ConflictError, NotFoundError
from ..models import Decision
from .clock import get_clock
from .lifecycle import lock_decision
from .transaction import load_decision_for_update, unit_of_work

logger = logging.getLogger(__name__)


def expired_decision_ids(now) -> list:
    return list(
        db.session.execute(
            select(Decision.id)
            .where(Decision.status == Decision.STATUS_VOTING, Decision.lock_time <= now)
            .order_by(Decision.lock_time)
        ).scalars()
    )


def tally_and_lock_expired() -> list:
    """Returns the ids locked by this run. One transaction per decision."""
    now = get_clock().now()
    locked = []
    for decision_id in expired_decision_ids(now):
        try:
            with unit_of_work():
                decision = load_decision_for_update(decision_id)
                if decision.status != Decision.STATUS_VOTING:
                    continue
                lock_decision(decision)
            locked.append(decision_id)
        except (ConflictError, NotFoundError) as e:
            # Locked or deleted by someone else since we listed it
            logger.info("Skipping decision %s during sweep: %s", decision_id, e)
        except Exception:
            logger.exception("Failed to lock decision %s", decision_id)

    logger.info("Deadline sweep locked %d decision(s)", len(locked))
    return locked
