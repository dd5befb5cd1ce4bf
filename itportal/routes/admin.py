# itportal/routes/admin.py
from flask import Blueprint, jsonify, current_app

from ..extensions import db
from ..decorators import admin_required_api
from ..errors import Forbidden, NotFound
from ..forms import parse_id
from ..models import User, Role, LoginAttempt
from ..services.onboarding import tracker_for_user
from ..session import current_session

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")

LOGIN_ATTEMPT_LIMIT = 100


def employee_roster():
    employees = User.query.filter_by(role=Role.EMPLOYEE).order_by(User.created_at.desc(), User.id.desc()).all()
    roster = []
    for employee in employees:
        entry = employee.to_identity()
        entry["onboarding"] = tracker_for_user(employee).progress()
        roster.append(entry)
    return roster


@admin_bp.route("/users", methods=["GET"])
@admin_required_api
def list_users():
    return jsonify({"users": employee_roster()})


@admin_bp.route("/users/<user_id>", methods=["DELETE"])
@admin_required_api
def delete_user(user_id):
    user_id = parse_id(user_id, "Invalid user ID")
    admin = current_session().user
    if user_id == admin.id:
        current_app.logger.warning("Admin %s attempted to delete their own account", admin.id)
        raise Forbidden("Admins cannot delete their own account through this endpoint.")
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("User %s deleted by admin %s", user_id, admin.id)
    return jsonify({"message": "User deleted successfully"})


@admin_bp.route("/login-attempts", methods=["GET"])
@admin_required_api
def list_login_attempts():
    attempts = (
        LoginAttempt.query.order_by(LoginAttempt.timestamp.desc(), LoginAttempt.id.desc())
        .limit(LOGIN_ATTEMPT_LIMIT)
        .all()
    )
    return jsonify([a.to_dict() for a in attempts])
