"""Token event model.

Append-only audit record of a token lifecycle event. The human-readable
summary is built from these fields by `tokenkeep.presentation`.
"""

from tokenkeep.db import db
from tokenkeep.utils import ensure_utc, now_utc


class TokenEvent(db.Model):
    __tablename__ = "token_event"

    id = db.Column(db.Integer, primary_key=True)
    # Nullable: a failed check against an unknown app_name belongs to no token
    token_id = db.Column(db.Integer, db.ForeignKey("token.id", ondelete="CASCADE"), nullable=True)
    event_type = db.Column(db.String(50), nullable=False, index=True)  # 'sign_up', 'sign_in', 'check_failed', 'reset_request'
    app_name = db.Column(db.String(100), nullable=True)
    actor = db.Column(db.String(100), nullable=True)
    description = db.Column(db.Text)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc, index=True)

    __table_args__ = (
        # Serves MAX(occurred_at) grouped by token for one event type
        db.Index("idx_token_event_token_type_time", "token_id", "event_type", "occurred_at"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "token_id": self.token_id,
            "event_type": self.event_type,
            "app_name": self.app_name,
            "actor": self.actor,
            "description": self.description,
            "occurred_at": ensure_utc(self.occurred_at),
        }

    def __repr__(self):
        return f"<TokenEvent {self.event_type}:{self.token_id}>"
