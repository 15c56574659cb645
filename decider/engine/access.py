from ..extensions import db
from ..exceptions import PermissionDeniedError
from ..models import Member


def find_member(decision, user_id) -> Member | None:
    if user_id is None:
        return None
    return db.session.execute(
        db.select(Member).filter_by(decision_id=decision.id, user_id=user_id)
    ).scalar_one_or_none()


def require_member(decision, user_id) -> Member:
    member = find_member(decision, user_id)
    if member is None:
        raise PermissionDeniedError("You are not a member of this decision")
    return member


def organizer_of(decision) -> Member | None:
    return db.session.execute(
        db.select(Member).filter_by(decision_id=decision.id, role=Member.ROLE_ORGANIZER)
    ).scalar_one_or_none()
