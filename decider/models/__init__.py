from .decision import Decision  # noqa: F401
from .member import Member  # noqa: F401
from .constraint import Constraint  # noqa: F401
from .option import Option  # noqa: F401
from .vote import Vote  # noqa: F401
from .result import Result  # noqa: F401
from .advance_vote import AdvanceVote  # noqa: F401
from .comment import Comment  # noqa: F401
from .audit_log import AuditLog  # noqa: F401

# Import ALL models so SQLAlchemy registers them

__all__ = [
    "Decision",
    "Member",
    "Constraint",
    "Option",
    "Vote",
    "Result",
    "AdvanceVote",
    "Comment",
    "AuditLog",
]
