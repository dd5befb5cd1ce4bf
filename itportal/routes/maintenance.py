# itportal/routes/maintenance.py
from datetime import datetime

from flask import Blueprint, jsonify, current_app

from ..extensions import db
from ..decorators import admin_required_api
from ..errors import InvalidInput, NotFound
from ..forms import MaintenanceEventForm, json_payload, validated, parse_id
from ..models import MaintenanceEvent
from ..session import current_session

maintenance_bp = Blueprint("maintenance", __name__, url_prefix="/maintenance")


def _get_event(raw_id):
    event_id = parse_id(raw_id, "Invalid event ID")
    event = db.session.get(MaintenanceEvent, event_id)
    if event is None:
        raise NotFound("Maintenance event not found")
    return event


def upcoming_events(now=None, limit=None):
    query = MaintenanceEvent.query.filter(MaintenanceEvent.upcoming_filter(now or datetime.utcnow()))
    query = query.order_by(MaintenanceEvent.start_date.asc(), MaintenanceEvent.id.asc())
    if limit:
        query = query.limit(limit)
    return query.all()


@maintenance_bp.route("", methods=["GET"])
def list_events():
    if current_session().is_admin:
        events = MaintenanceEvent.query.order_by(
            MaintenanceEvent.start_date.desc(), MaintenanceEvent.id.desc()
        ).all()
    else:
        events = upcoming_events()
    return jsonify([e.to_dict() for e in events])


@maintenance_bp.route("", methods=["POST"])
@admin_required_api
def create_event():
    form = validated(MaintenanceEventForm, json_payload())
    event = MaintenanceEvent(
        title=form.title.data,
        description=form.description.data or None,
        start_date=form.startDate.data,
        end_date=form.endDate.data,
        type=form.type.data,
        author_id=current_session().user.id,
    )
    db.session.add(event)
    db.session.commit()
    current_app.logger.info("Maintenance event %s created by user %s", event.id, event.author_id)
    return jsonify(event.to_dict()), 201


@maintenance_bp.route("/<event_id>", methods=["GET"])
def get_event(event_id):
    return jsonify(_get_event(event_id).to_dict())


@maintenance_bp.route("/<event_id>", methods=["PUT"])
@admin_required_api
def update_event(event_id):
    event = _get_event(event_id)
    form = validated(MaintenanceEventForm, json_payload(), partial=True)
    if not list(form):
        raise InvalidInput("No fields to update")

    start = form.startDate.data if "startDate" in form else event.start_date
    end = form.endDate.data if "endDate" in form else event.end_date
    if end is not None and end < start:
        raise InvalidInput("Validation failed", errors={"endDate": ["End date must not be before the start date"]})

    if "title" in form:
        event.title = form.title.data
    if "description" in form:
        event.description = form.description.data or None
    if "type" in form:
        event.type = form.type.data
    event.start_date = start
    event.end_date = end
    db.session.commit()
    current_app.logger.info("Maintenance event %s updated", event.id)
    return jsonify(event.to_dict())


@maintenance_bp.route("/<event_id>", methods=["DELETE"])
@admin_required_api
def delete_event(event_id):
    event = _get_event(event_id)
    deleted_id = event.id
    db.session.delete(event)
    db.session.commit()
    current_app.logger.info("Maintenance event %s deleted", deleted_id)
    return jsonify({"message": "Maintenance event deleted successfully"})
