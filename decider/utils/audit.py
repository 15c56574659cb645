from typing import Optional, Dict, Any
from flask import request, has_request_context

from ..extensions import db
from ..models.audit_log import AuditLog


def _request_context():
    """
    Returns (ip, user_agent) for HTTP requests, (None, None) for the
    CLI sweep and other callers outside a request.
    """
    if not has_request_context():
        return None, None
    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    ua = request.headers.get("User-Agent")
    return ip, ua[:255] if ua else None


def audit_log(
    action: str,
    entity_type: Optional[str] = None,
    entity_id=None,
    decision_id=None,
    actor_user_id=None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Stage an audit row in the current transaction; it commits or rolls back with the change it records."""
    ip, ua = _request_context()

    log = AuditLog(
        actor_user_id=actor_user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        decision_id=decision_id,
        ip_address=ip,
        user_agent=ua,
        details=details or None,
    )
    db.session.add(log)
