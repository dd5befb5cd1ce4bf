# itportal/routes/pages.py
# Role-gated landing pages. Browsers are redirected; the JSON bodies carry
# what the dashboards display.
from flask import Blueprint, redirect, jsonify

from ..decorators import login_required, admin_required
from ..models import Announcement, LoginAttempt
from ..session import current_session
from .admin import employee_roster
from .maintenance import upcoming_events

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/")
def home():
    return redirect(current_session().landing_page())


@pages_bp.route("/dashboard")
@login_required
def dashboard():
    portal_session = current_session()
    announcements = (
        Announcement.query.filter_by(is_active=True)
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        .limit(5)
        .all()
    )
    return jsonify({
        "user": portal_session.user.to_identity(),
        "onboarding": portal_session.tracker.progress(),
        "announcements": [a.to_dict() for a in announcements],
        "maintenance": [e.to_dict() for e in upcoming_events(limit=2)],
    })


@pages_bp.route("/admin/dashboard")
@admin_required
def admin_dashboard():
    roster = employee_roster()
    failed_logins = LoginAttempt.query.filter_by(success=False).count()
    return jsonify({
        "user": current_session().user.to_identity(),
        "employees": {
            "total": len(roster),
            "onboardingComplete": sum(1 for e in roster if e["onboarding"]["isComplete"]),
        },
        "announcements": {
            "total": Announcement.query.count(),
            "active": Announcement.query.filter_by(is_active=True).count(),
        },
        "failedLogins": failed_logins,
        "upcomingMaintenance": [e.to_dict() for e in upcoming_events()],
    })
