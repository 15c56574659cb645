import uuid
from ..extensions import db
from ..engine.clock import utcnow


class Option(db.Model):
    __tablename__ = "options"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    decision_id = db.Column(db.Uuid, db.ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    submitted_by = db.Column(db.Uuid, nullable=False, index=True)

    # Submission order within the decision; tally ties keep this order
    position = db.Column(db.Integer, nullable=False)

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    # "metadata" is reserved on declarative models
    details = db.Column("metadata", db.JSON, nullable=True)

    # Verdict frozen at submission time, never re-evaluated
    passes_constraints = db.Column(db.Boolean, nullable=False, default=True)
    constraint_violations = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    votes = db.relationship("Vote", lazy=True, cascade="all, delete-orphan")
    comments = db.relationship("Comment", lazy=True, cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("decision_id", "position", name="uq_options_decision_position"),
    )
