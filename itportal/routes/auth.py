# itportal/routes/auth.py
from flask import Blueprint, request, redirect, jsonify, session, current_app
from flask_wtf.csrf import generate_csrf

from ..extensions import limiter
from ..forms import json_payload
from ..security import issue_token
from ..services.auth import authenticate, record_rejected_login
from ..services.onboarding import finalize
from ..session import current_session

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _login_rate_limit():
    return current_app.config["LOGIN_RATE_LIMIT"]


def _register_rate_limit():
    return current_app.config["REGISTER_RATE_LIMIT"]


def _audit_throttled_login(request_limit):
    current_app.logger.warning("Login rate limit hit: %s", request_limit.limit)
    record_rejected_login()


def signed_in(user, message, status):
    portal_session = current_session()
    portal_session.adopt(user)
    if not portal_session.via_token:
        session.permanent = True
    return jsonify({
        "message": message,
        "user": user.to_identity(),
        "token": issue_token(user),
        "redirect": portal_session.landing_page(),
    }), status


@auth_bp.route("/csrf", methods=["GET"])
def csrf_token():
    return jsonify({"csrfToken": generate_csrf()})


@auth_bp.route("/login", methods=["GET"])
def login():
    portal_session = current_session()
    if portal_session.is_authenticated:
        return redirect(portal_session.landing_page())
    return jsonify({"message": "Please log in", "session": portal_session.to_dict()})


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(_login_rate_limit, on_breach=_audit_throttled_login)
def login_post():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    user = authenticate(payload)
    return signed_in(user, "Login successful", 200)


@auth_bp.route("/register", methods=["POST"])
@limiter.limit(_register_rate_limit)
def register():
    payload = json_payload()
    user = finalize(
        payload.get("firstName"),
        payload.get("lastName"),
        payload.get("idNumber"),
        payload.get("userRole"),
        payload.get("currentAgreedPolicies"),
        payload.get("currentCompletedTools"),
    )
    return signed_in(user, "User registered successfully", 201)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    current_session().logout()
    return jsonify({"message": "Logged out"})


@auth_bp.route("/session", methods=["GET"])
def session_state():
    portal_session = current_session()
    body = portal_session.to_dict()
    body["user"] = portal_session.user.to_identity() if portal_session.user else None
    return jsonify(body)
