import uuid
from ..extensions import db
from ..engine.clock import utcnow


class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    decision_id = db.Column(db.Uuid, db.ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.Uuid, nullable=False)

    # Exactly one of option_id / constraint_id is set
    option_id = db.Column(db.Uuid, db.ForeignKey("options.id", ondelete="CASCADE"), nullable=True, index=True)
    constraint_id = db.Column(db.Uuid, db.ForeignKey("constraints.id", ondelete="CASCADE"), nullable=True, index=True)
    parent_id = db.Column(db.Uuid, db.ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)

    body = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    replies = db.relationship(
        "Comment", lazy=True, cascade="all, delete-orphan",
        backref=db.backref("parent", remote_side=[id]),
    )
