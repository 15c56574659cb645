import uuid
from ..extensions import db
from ..engine.clock import utcnow


class Result(db.Model):
    """One tallied row per eligible option, written once when the decision locks."""

    __tablename__ = "results"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    decision_id = db.Column(db.Uuid, db.ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    option_id = db.Column(db.Uuid, db.ForeignKey("options.id", ondelete="CASCADE"), nullable=False)

    total_points = db.Column(db.Integer, nullable=False)
    average_rank = db.Column(db.Float, nullable=True)
    rank = db.Column(db.Integer, nullable=False)
    is_winner = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    option = db.relationship("Option", lazy="joined")

    __table_args__ = (
        db.UniqueConstraint("decision_id", "option_id", name="uq_results_decision_option"),
    )
