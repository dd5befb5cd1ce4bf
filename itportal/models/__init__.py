from .user import User, Role, name_key
from .login_attempt import LoginAttempt
from .announcement import Announcement
from .maintenance import MaintenanceEvent, MaintenanceEventType

__all__ = [
    "User",
    "Role",
    "name_key",
    "LoginAttempt",
    "Announcement",
    "MaintenanceEvent",
    "MaintenanceEventType",
]
