# itportal/routes/onboarding.py
from flask import Blueprint, request, jsonify, current_app

from ..extensions import db
from ..catalog import get_catalog
from ..errors import InvalidInput, NotFound
from ..forms import json_payload
from ..services.onboarding import finalize_tracker
from ..session import current_session
from .auth import signed_in

onboarding_bp = Blueprint("onboarding", __name__, url_prefix="/onboarding")


@onboarding_bp.route("", methods=["GET"])
def progress():
    return jsonify(current_session().tracker.progress())


@onboarding_bp.route("/catalog", methods=["GET"])
def catalog():
    portal_session = current_session()
    role = request.args.get("role") or portal_session.tracker.role.value
    return jsonify(get_catalog().to_dict(role))


@onboarding_bp.route("/start", methods=["POST"])
def start():
    portal_session = current_session()
    if not portal_session.is_authenticated:
        payload = request.get_json(silent=True) or {}
        role = payload.get("userRole") if isinstance(payload, dict) else None
        portal_session.restart_onboarding(role or "EMPLOYEE")
    return jsonify(portal_session.tracker.progress())


@onboarding_bp.route("/policies/<policy_id>", methods=["POST"])
def agree_policy(policy_id):
    portal_session = current_session()
    if policy_id not in portal_session.tracker.catalog.policy_ids:
        raise NotFound("Policy not found")
    portal_session.tracker.agree_policy(policy_id)
    if portal_session.user is not None:
        portal_session.user.agree_policy(policy_id)
        db.session.commit()
    return jsonify(portal_session.tracker.progress())


@onboarding_bp.route("/tools/<tool_id>", methods=["POST"])
def complete_tool(tool_id):
    portal_session = current_session()
    tracker = portal_session.tracker
    if tool_id not in tracker.catalog.tool_ids(tracker.role):
        raise NotFound("Tool not found")
    tracker.complete_tool(tool_id)
    if portal_session.user is not None:
        portal_session.user.complete_tool(tool_id)
        db.session.commit()
    return jsonify(tracker.progress())


@onboarding_bp.route("/complete", methods=["POST"])
def complete():
    portal_session = current_session()
    if portal_session.is_authenticated:
        raise InvalidInput("Already signed in")
    user = finalize_tracker(portal_session.tracker, json_payload())
    current_app.logger.info("Onboarding finished for user %s", user.id)
    return signed_in(user, "User registered successfully", 201)
