# itportal/session.py
# Request-scoped session object. The client holds the state in the signed
# Flask session cookie under ACTIVE_SESSION_KEY; every request hydrates it,
# validates the shape and re-checks the identity against the database.
from flask import current_app, g, session

from .extensions import db
from .catalog import get_catalog
from .models import User, Role
from .security import bearer_token, read_token
from .services.onboarding import OnboardingTracker

ACTIVE_SESSION_KEY = "activeSession"

_FIELDS = {
    "isLoggedIn": bool,
    "onboardingComplete": bool,
    "agreedPolicies": list,
    "completedTools": list,
}
_OPTIONAL_TEXT = ("userRole", "firstName", "lastName")


def is_valid_shape(data):
    if not isinstance(data, dict):
        return False
    for key, kind in _FIELDS.items():
        if not isinstance(data.get(key), kind):
            return False
    for key in _OPTIONAL_TEXT:
        if data.get(key) is not None and not isinstance(data.get(key), str):
            return False
    if not all(isinstance(v, str) for v in data["agreedPolicies"] + data["completedTools"]):
        return False
    user_id = data.get("userId")
    if data["isLoggedIn"]:
        return isinstance(user_id, int) and not isinstance(user_id, bool) and data.get("userRole") in Role.__members__
    return user_id is None or isinstance(user_id, int)


def _role(value):
    try:
        return Role(str(value).strip().upper())
    except ValueError:
        return Role.EMPLOYEE


class PortalSession:
    """Anonymous or Authenticated(user), plus the onboarding tracker."""

    def __init__(self, user=None, role=Role.EMPLOYEE, agreed=(), completed=(), via_token=False):
        self.user = None
        self.via_token = via_token
        self.tracker = OnboardingTracker(get_catalog(), role, agreed, completed)
        if user is not None:
            self.adopt(user)

    # -----------------------
    # init
    # -----------------------
    @classmethod
    def restore(cls, store):
        raw = store.get(ACTIVE_SESSION_KEY)
        if raw is None:
            return cls()
        if not is_valid_shape(raw):
            current_app.logger.warning("Discarding malformed session state")
            store.pop(ACTIVE_SESSION_KEY, None)
            return cls()
        if not raw["isLoggedIn"]:
            return cls(role=_role(raw.get("userRole")), agreed=raw["agreedPolicies"], completed=raw["completedTools"])

        user = db.session.get(User, raw["userId"])
        if user is None or user.role.value != raw["userRole"]:
            current_app.logger.info("Discarding session for user %s: account missing or role changed", raw["userId"])
            store.pop(ACTIVE_SESSION_KEY, None)
            return cls()
        return cls(user=user)

    @classmethod
    def from_token(cls, token):
        data = read_token(token)
        if data is None:
            return cls(via_token=True)
        user = db.session.get(User, data["uid"])
        if user is None or user.role.value != data.get("role"):
            return cls(via_token=True)
        return cls(user=user, via_token=True)

    # -----------------------
    # transitions
    # -----------------------
    def adopt(self, user):
        self.user = user
        self.tracker = OnboardingTracker(get_catalog(), user.role, user.agreed_policies or [], user.completed_tools or [])

    def logout(self):
        self.user = None
        self.tracker = OnboardingTracker(get_catalog())

    def restart_onboarding(self, role):
        self.tracker = OnboardingTracker(get_catalog(), _role(role))

    # -----------------------
    # state
    # -----------------------
    @property
    def is_authenticated(self):
        return self.user is not None

    @property
    def is_admin(self):
        return self.user is not None and self.user.role == Role.ADMIN

    def landing_page(self):
        if self.is_admin:
            return "/admin/dashboard"
        if self.is_authenticated:
            return "/dashboard"
        return "/auth/login"

    def to_dict(self):
        user = self.user
        return {
            "isLoggedIn": user is not None,
            "userRole": user.role.value if user else self.tracker.role.value,
            "firstName": user.first_name if user else None,
            "lastName": user.last_name if user else None,
            "agreedPolicies": list(self.tracker.agreed),
            "completedTools": list(self.tracker.completed),
            # admins are provisioned out of band and skip onboarding
            "onboardingComplete": True if self.is_admin else self.tracker.is_complete,
            "userId": user.id if user else None,
        }

    def persist(self, store):
        if self.via_token:
            return
        if self.user is None and not self.tracker.agreed and not self.tracker.completed:
            store.pop(ACTIVE_SESSION_KEY, None)
            return
        data = self.to_dict()
        if store.get(ACTIVE_SESSION_KEY) != data:
            store[ACTIVE_SESSION_KEY] = data


def load_portal_session():
    token = bearer_token()
    if token:
        return PortalSession.from_token(token)
    return PortalSession.restore(session)


def current_session():
    if "portal_session" not in g:
        g.portal_session = load_portal_session()
    return g.portal_session


def init_app(app):
    @app.before_request
    def _hydrate_session():
        g.portal_session = load_portal_session()

    @app.after_request
    def _persist_session(response):
        portal_session = g.get("portal_session")
        if portal_session is not None:
            portal_session.persist(session)
        return response
