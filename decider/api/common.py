from ..engine.access import require_member
from ..engine.lifecycle import ensure_allowed
from ..engine.transaction import get_decision


def load_for_member(decision_id, user_id, action=None):
    """Fetch a decision for a read endpoint; the caller must be a member (and allowed ``action`` if given)."""
    decision = get_decision(decision_id)
    member = require_member(decision, user_id)
    if action is not None:
        ensure_allowed(action, decision, member)
    return decision, member
