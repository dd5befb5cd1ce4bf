# itportal/decorators.py
from functools import wraps

from flask import redirect, url_for, request

from .errors import Unauthorized
from .session import current_session


def login_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_session().is_authenticated:
            return redirect(url_for("auth.login", next=request.path))
        return f(*args, **kwargs)
    return decorated


def login_required_api(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_session().is_authenticated:
            raise Unauthorized()
        return f(*args, **kwargs)
    return decorated


def admin_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        portal_session = current_session()
        if not portal_session.is_authenticated:
            return redirect(url_for("auth.login", next=request.path))
        if not portal_session.is_admin:
            return redirect(url_for("pages.dashboard"))
        return f(*args, **kwargs)
    return decorated


def admin_required_api(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        if not current_session().is_admin:
            raise Unauthorized()
        return f(*args, **kwargs)
    return decorated
