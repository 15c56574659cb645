"""Rule violations raised by the decision engine.

Every guard runs before the first mutation, so a raised ``DecisionError``
means no state changed. The HTTP layer renders these through
``register_error_handlers``.
"""


class DecisionError(Exception):
    code = "DECISION_ERROR"
    status = 400

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DecisionError):
    """Malformed input: bad ballot shape, missing constraint fields."""

    code = "VALIDATION_ERROR"
    status = 400


class IllegalTransitionError(DecisionError):
    """Preconditions for the requested action are not met in this phase."""

    code = "ILLEGAL_TRANSITION"
    status = 409


class PermissionDeniedError(IllegalTransitionError):
    """Organizer-only action attempted by someone else, or by a non-member."""

    code = "FORBIDDEN"
    status = 403


class PolicyRejectedError(DecisionError):
    code = "POLICY_REJECTED"
    status = 403


class ConflictError(DecisionError):
    """Race lost: the phase moved underneath us or the user already voted."""

    code = "CONFLICT"
    status = 409


class NotFoundError(DecisionError):
    code = "NOT_FOUND"
    status = 404
