# itportal/routes/announcements.py
from flask import Blueprint, jsonify, current_app

from ..extensions import db
from ..decorators import admin_required_api
from ..errors import InvalidInput, NotFound
from ..forms import AnnouncementForm, json_payload, validated, parse_id
from ..models import Announcement
from ..session import current_session

announcements_bp = Blueprint("announcements", __name__, url_prefix="/announcements")


def _get_announcement(raw_id):
    announcement_id = parse_id(raw_id, "Invalid announcement ID")
    announcement = db.session.get(Announcement, announcement_id)
    if announcement is None:
        raise NotFound("Announcement not found")
    return announcement


@announcements_bp.route("", methods=["GET"])
def list_announcements():
    query = Announcement.query
    if not current_session().is_admin:
        query = query.filter_by(is_active=True)
    announcements = query.order_by(Announcement.created_at.desc(), Announcement.id.desc()).all()
    return jsonify([a.to_dict() for a in announcements])


@announcements_bp.route("", methods=["POST"])
@admin_required_api
def create_announcement():
    payload = json_payload()
    form = validated(AnnouncementForm, payload)
    announcement = Announcement(
        title=form.title.data,
        content=form.content.data,
        is_active=form.isActive.data if "isActive" in payload else True,
        author_id=current_session().user.id,
    )
    db.session.add(announcement)
    db.session.commit()
    current_app.logger.info("Announcement %s created by user %s", announcement.id, announcement.author_id)
    return jsonify(announcement.to_dict()), 201


@announcements_bp.route("/<announcement_id>", methods=["GET"])
@admin_required_api
def get_announcement(announcement_id):
    return jsonify(_get_announcement(announcement_id).to_dict())


@announcements_bp.route("/<announcement_id>", methods=["PUT"])
@admin_required_api
def update_announcement(announcement_id):
    announcement = _get_announcement(announcement_id)
    form = validated(AnnouncementForm, json_payload(), partial=True)
    if not list(form):
        raise InvalidInput("No fields to update")
    if "title" in form:
        announcement.title = form.title.data
    if "content" in form:
        announcement.content = form.content.data
    if "isActive" in form:
        announcement.is_active = form.isActive.data
    db.session.commit()
    current_app.logger.info("Announcement %s updated", announcement.id)
    return jsonify(announcement.to_dict())


@announcements_bp.route("/<announcement_id>", methods=["DELETE"])
@admin_required_api
def delete_announcement(announcement_id):
    announcement = _get_announcement(announcement_id)
    deleted_id = announcement.id
    db.session.delete(announcement)
    db.session.commit()
    current_app.logger.info("Announcement %s deleted", deleted_id)
    return jsonify({"message": "Announcement deleted successfully"})
