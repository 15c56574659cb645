import uuid
from ..extensions import db
from ..engine.clock import utcnow


class AdvanceVote(db.Model):
    __tablename__ = "advance_votes"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    decision_id = db.Column(db.Uuid, db.ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Uuid, nullable=False)
    from_phase = db.Column(db.String(20), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("decision_id", "from_phase", "user_id", name="uq_advance_votes_decision_phase_user"),
    )
