import uuid
from ..extensions import db
from ..engine.clock import utcnow


class Constraint(db.Model):
    __tablename__ = "constraints"

    TYPE_BUDGET_MAX = "budget_max"
    TYPE_DATE_RANGE = "date_range"
    TYPE_DISTANCE = "distance"
    TYPE_DURATION = "duration"
    TYPE_EXCLUSION = "exclusion"
    VALID_TYPES = (TYPE_BUDGET_MAX, TYPE_DATE_RANGE, TYPE_DISTANCE, TYPE_DURATION, TYPE_EXCLUSION)

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    decision_id = db.Column(db.Uuid, db.ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Uuid, nullable=False, index=True)

    type = db.Column(db.String(20), nullable=False)
    # Shape depends on type; see engine.validator for the typed variants
    value = db.Column(db.JSON, nullable=False)
    weight = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    comments = db.relationship("Comment", lazy=True, cascade="all, delete-orphan")

    def criterion(self):
        from ..engine.validator import criterion_from_value
        return criterion_from_value(self.type, self.value)
