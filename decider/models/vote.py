import uuid
from ..extensions import db
from ..engine.clock import utcnow


class Vote(db.Model):
    __tablename__ = "votes"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)

    decision_id = db.Column(db.Uuid, db.ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    option_id = db.Column(db.Uuid, db.ForeignKey("options.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Uuid, nullable=False, index=True)

    # Points under point allocation, rank (1 = best) under forced ranking
    value = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("decision_id", "user_id", "option_id", name="uq_votes_decision_user_option"),
    )
