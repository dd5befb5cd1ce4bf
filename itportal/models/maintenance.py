# itportal/models/maintenance.py
import enum
from datetime import datetime

from ..extensions import db
from .user import _iso


class MaintenanceEventType(str, enum.Enum):
    PREVENTIVE_MAINTENANCE = "PREVENTIVE_MAINTENANCE"
    REGULAR_UPDATE = "REGULAR_UPDATE"
    EMERGENCY_MAINTENANCE = "EMERGENCY_MAINTENANCE"
    SERVICE_DEPLOYMENT = "SERVICE_DEPLOYMENT"


class MaintenanceEvent(db.Model):
    __tablename__ = "maintenance_events"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.DateTime, nullable=False, index=True)
    end_date = db.Column(db.DateTime, nullable=True)
    type = db.Column(db.Enum(MaintenanceEventType, name="maintenance_event_type"), nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = db.relationship("User", back_populates="maintenance_events")

    @classmethod
    def upcoming_filter(cls, now):
        # starts later, ends later, or open-ended and already running
        return db.or_(
            cls.start_date >= now,
            cls.end_date >= now,
            db.and_(cls.end_date.is_(None), cls.start_date <= now),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "type": self.type.value,
            "authorId": self.author_id,
            "author": self.author.to_summary() if self.author else None,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
