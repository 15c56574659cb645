import uuid
from flask import abort
from flask_jwt_extended import get_jwt_identity


def current_user_id() -> uuid.UUID:
    """
    The acting user's id from the JWT ``sub`` claim.
    Use with @jwt_required() above the view.
    """
    identity = get_jwt_identity()
    try:
        return uuid.UUID(str(identity))
    except (TypeError, ValueError):
        abort(401, description="Token subject is not a valid user id")
