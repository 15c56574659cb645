from contextlib import contextmanager

from sqlalchemy import select, update

from ..extensions import db
from ..exceptions import ConflictError, NotFoundError
from ..models import Decision


@contextmanager
def unit_of_work():
    """Commit everything done inside the block, or nothing at all."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def load_decision_for_update(decision_id) -> Decision:
    """Load a decision row locked for the rest of the transaction.

    PostgreSQL serialises concurrent writers on the row; SQLite ignores
    FOR UPDATE and serialises writers on the database instead.
    """
    decision = db.session.execute(
        select(Decision)
        .where(Decision.id == decision_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if decision is None:
        raise NotFoundError("Decision not found", {"decision_id": str(decision_id)})
    return decision


def get_decision(decision_id) -> Decision:
    decision = db.session.get(Decision, decision_id)
    if decision is None:
        raise NotFoundError("Decision not found", {"decision_id": str(decision_id)})
    return decision


def compare_and_set_status(decision: Decision, from_status: str, to_status: str, **values) -> None:
    """Move ``decision`` from one phase to another, or raise ConflictError if it already moved."""
    result = db.session.execute(
        update(Decision)
        .where(Decision.id == decision.id, Decision.status == from_status)
        .values(status=to_status, **values)
        .execution_options(synchronize_session="evaluate")
    )
    if result.rowcount != 1:
        raise ConflictError(
            "Decision phase changed concurrently",
            {"expected": from_status, "requested": to_status},
        )
