import uuid
from ..extensions import db
from ..engine.clock import utcnow


class Member(db.Model):
    __tablename__ = "decision_members"

    ROLE_ORGANIZER = "organizer"
    ROLE_MEMBER = "member"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    decision_id = db.Column(db.Uuid, db.ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Uuid, nullable=False, index=True)

    role = db.Column(db.String(20), nullable=False, default=ROLE_MEMBER)
    has_voted = db.Column(db.Boolean, nullable=False, default=False)

    joined_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("decision_id", "user_id", name="uq_decision_members_decision_user"),
    )

    def is_organizer(self) -> bool:
        return self.role == self.ROLE_ORGANIZER
