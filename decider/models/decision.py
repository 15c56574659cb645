import uuid
from ..extensions import db
from ..engine.clock import utcnow


class Decision(db.Model):
    __tablename__ = "decisions"

    STATUS_CONSTRAINTS = "constraints"
    STATUS_OPTIONS = "options"
    STATUS_VOTING = "voting"
    STATUS_LOCKED = "locked"

    MECHANISM_POINTS = "point_allocation"
    MECHANISM_RANKING = "forced_ranking"
    VALID_MECHANISMS = (MECHANISM_POINTS, MECHANISM_RANKING)

    SUBMISSION_ANYONE = "anyone"
    SUBMISSION_ORGANIZER = "organizer_only"
    VALID_SUBMISSION_MODES = (SUBMISSION_ANYONE, SUBMISSION_ORGANIZER)

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    type_label = db.Column(db.String(50), nullable=True)

    # The organizer; kept in sync with the single organizer member row
    created_by = db.Column(db.Uuid, nullable=False, index=True)

    lock_time = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_CONSTRAINTS, index=True)

    voting_mechanism = db.Column(db.String(30), nullable=False, default=MECHANISM_POINTS)
    max_options = db.Column(db.Integer, nullable=False, default=7)
    option_submission = db.Column(db.String(20), nullable=False, default=SUBMISSION_ANYONE)
    reveal_votes_after_lock = db.Column(db.Boolean, nullable=False, default=False)
    silent_voting = db.Column(db.Boolean, nullable=False, default=False)
    constraint_weighting_enabled = db.Column(db.Boolean, nullable=False, default=False)

    invite_code = db.Column(db.String(16), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    # Written from the app clock by every change to the row
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    locked_at = db.Column(db.DateTime, nullable=True)

    members = db.relationship(
        "Member", backref="decision", lazy=True,
        cascade="all, delete-orphan", order_by="Member.joined_at",
    )
    constraints = db.relationship(
        "Constraint", backref="decision", lazy=True,
        cascade="all, delete-orphan", order_by="Constraint.created_at",
    )
    options = db.relationship(
        "Option", backref="decision", lazy=True,
        cascade="all, delete-orphan", order_by="Option.position",
    )
    votes = db.relationship("Vote", lazy=True, cascade="all, delete-orphan")
    results = db.relationship("Result", lazy=True, cascade="all, delete-orphan", order_by="Result.rank")
    advance_votes = db.relationship("AdvanceVote", lazy=True, cascade="all, delete-orphan")
    comments = db.relationship("Comment", lazy=True, cascade="all, delete-orphan")

    def is_locked(self) -> bool:
        return self.status == self.STATUS_LOCKED
