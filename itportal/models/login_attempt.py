# itportal/models/login_attempt.py
from datetime import datetime

from ..extensions import db
from .user import _iso


class LoginAttempt(db.Model):
    """Audit row written for every login POST; never updated afterwards."""

    __tablename__ = "login_attempts"
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    attempted_identifier = db.Column(db.String(255), nullable=False, default="")
    success = db.Column(db.Boolean, nullable=False, default=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    ip_address = db.Column(db.String(64), nullable=False, default="N/A")
    user_agent = db.Column(db.String(512), nullable=False, default="N/A")

    user = db.relationship("User", back_populates="login_attempts")

    def to_dict(self):
        return {
            "id": self.id,
            "timestamp": _iso(self.timestamp),
            "attemptedIdentifier": self.attempted_identifier,
            "success": self.success,
            "userId": self.user_id,
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
            "user": self.user.to_summary() if self.user else None,
        }
