# itportal/errors.py
from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db


class PortalError(Exception):
    """Base class for errors that map onto a JSON response."""

    status_code = 500
    message = "An unexpected error occurred"

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.errors = errors

    def to_dict(self):
        body = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class InvalidInput(PortalError):
    status_code = 400
    message = "Invalid input"


class InvalidCredentials(PortalError):
    status_code = 401
    message = "Invalid credentials"


class Unauthorized(PortalError):
    status_code = 401
    message = "Unauthorized"


class Forbidden(PortalError):
    status_code = 403
    message = "Forbidden"


class NotFound(PortalError):
    status_code = 404
    message = "Not found"


class DuplicateName(PortalError):
    status_code = 409
    message = "User with this first and last name already exists"


class DuplicateSecret(PortalError):
    status_code = 409
    message = "This ID number is already in use"


def register_error_handlers(app):
    @app.errorhandler(PortalError)
    def handle_portal_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"message": err.description}), err.code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(err):
        db.session.rollback()
        current_app.logger.exception("Database error")
        return jsonify({"message": PortalError.message}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        current_app.logger.exception("Unhandled error")
        return jsonify({"message": PortalError.message}), 500
