"""
Model: Token
An opaque bearer credential issued to an external application.
"""

from tokenkeep.db import db
from tokenkeep.utils import ensure_utc, now_utc


class Token(db.Model):
    __tablename__ = "token"

    id = db.Column(db.Integer, primary_key=True)
    app_name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(255), nullable=False, default="")
    secret = db.Column(db.String(64), unique=True, nullable=False, index=True)
    enabled = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    events = db.relationship("TokenEvent", backref="token", lazy="dynamic", passive_deletes=True)

    def to_dict(self):
        # The secret never leaves the store through a dict representation
        return {
            "id": self.id,
            "app_name": self.app_name,
            "display_name": self.display_name,
            "enabled": self.enabled,
            "created_at": ensure_utc(self.created_at),
            "updated_at": ensure_utc(self.updated_at),
        }

    def __repr__(self):
        return f"<Token {self.app_name}>"
