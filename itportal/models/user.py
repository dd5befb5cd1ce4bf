# itportal/models/user.py
import enum
from datetime import datetime

from sqlalchemy.ext.mutable import MutableList

from ..extensions import db
from ..security import hash_secret, verify_secret


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


def name_key(first_name, last_name):
    """Case-insensitive, trimmed identity of an employee name pair."""
    return f"{(first_name or '').strip().lower()}\x1f{(last_name or '').strip().lower()}"


class User(db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    role = db.Column(db.Enum(Role, name="user_role"), nullable=False, default=Role.EMPLOYEE, index=True)

    # employees
    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)
    name_key = db.Column(db.String(255), unique=True, nullable=True, index=True)
    id_number_hash = db.Column(db.String(256), nullable=True)

    # admins
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    password_hash = db.Column(db.String(256), nullable=True)

    agreed_policies = db.Column(MutableList.as_mutable(db.JSON), nullable=False, default=list)
    completed_tools = db.Column(MutableList.as_mutable(db.JSON), nullable=False, default=list)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # deleting a user unlinks, never deletes, its audit rows and content
    login_attempts = db.relationship("LoginAttempt", back_populates="user")
    announcements = db.relationship("Announcement", back_populates="author")
    maintenance_events = db.relationship("MaintenanceEvent", back_populates="author")

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    @property
    def display_name(self):
        if self.first_name or self.last_name:
            return " ".join(p for p in (self.first_name, self.last_name) if p)
        return self.email or f"user #{self.id}"

    def set_id_number(self, secret):
        self.id_number_hash = hash_secret(secret)

    def check_id_number(self, secret):
        return bool(self.id_number_hash) and verify_secret(self.id_number_hash, secret)

    def set_password(self, password):
        self.password_hash = hash_secret(password)

    def check_password(self, password):
        return bool(self.password_hash) and verify_secret(self.password_hash, password)

    def agree_policy(self, policy_id):
        if policy_id not in self.agreed_policies:
            self.agreed_policies.append(policy_id)

    def complete_tool(self, tool_id):
        if tool_id not in self.completed_tools:
            self.completed_tools.append(tool_id)

    def to_identity(self):
        # hashes never leave the server
        return {
            "id": self.id,
            "role": self.role.value,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "agreedPolicies": list(self.agreed_policies or []),
            "completedTools": list(self.completed_tools or []),
            "createdAt": _iso(self.created_at),
        }

    def to_summary(self):
        return {"id": self.id, "firstName": self.first_name, "lastName": self.last_name, "email": self.email}

    def __repr__(self):
        return f"<User {self.id} {self.role.value} {self.display_name}>"


def _iso(value):
    return value.isoformat() + "Z" if value else None
