# itportal/services/auth.py
from flask import current_app, request

from ..extensions import db
from ..errors import InvalidInput, InvalidCredentials
from ..forms import EmployeeLoginForm, AdminLoginForm, load_form
from ..models import User, Role, LoginAttempt, name_key
from ..security import burn_hash_time, client_ip, client_user_agent

EMPLOYEE_KEYS = ("firstName", "lastName", "idNumber")


def attempted_identifier(payload, admin=False):
    if not admin and any(k in payload for k in EMPLOYEE_KEYS):
        first = str(payload.get("firstName") or "").strip()
        last = str(payload.get("lastName") or "").strip()
        return f"{first} {last}".strip()
    return str(payload.get("email") or "").strip()


def record_attempt(identifier, user, success):
    attempt = LoginAttempt(
        attempted_identifier=identifier[:255],
        success=success,
        user_id=user.id if user is not None else None,
        ip_address=client_ip()[:64],
        user_agent=client_user_agent()[:512],
    )
    db.session.add(attempt)
    db.session.commit()
    return attempt


def find_employee(first_name, last_name):
    return User.query.filter_by(role=Role.EMPLOYEE, name_key=name_key(first_name, last_name)).first()


def find_admin(email):
    return User.query.filter_by(role=Role.ADMIN, email=email.strip().lower()).first()


def credential_form(payload):
    """Employee shape first, then admin; None when neither validates."""
    for form_cls in (EmployeeLoginForm, AdminLoginForm):
        form = load_form(form_cls, payload)
        if form.validate():
            return form
    return None


def record_rejected_login():
    """Audit a login POST turned away before authenticate() ran."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    record_attempt(attempted_identifier(payload), None, False)


def authenticate(payload):
    """Verify one login payload and record it in the audit log.

    The payload is either {firstName, lastName, idNumber} or {email, password}.
    Returns the matching User; raises InvalidInput for a malformed payload and
    InvalidCredentials for an unknown identity or a wrong secret alike.
    """
    form = credential_form(payload)
    if form is None:
        record_attempt(attempted_identifier(payload), None, False)
        current_app.logger.info("Login rejected: malformed payload")
        raise InvalidInput()
    identifier = attempted_identifier(payload, admin=isinstance(form, AdminLoginForm))

    if isinstance(form, EmployeeLoginForm):
        user = find_employee(form.firstName.data, form.lastName.data)
        secret = form.idNumber.data
        valid = user is not None and user.check_id_number(secret)
    else:
        user = find_admin(form.email.data)
        secret = form.password.data
        valid = user is not None and user.check_password(secret)

    if user is None:
        burn_hash_time(secret)

    record_attempt(identifier, user, valid)
    if not valid:
        current_app.logger.info("Login failed for %r", identifier)
        raise InvalidCredentials()

    current_app.logger.info("Login succeeded for user %s (%s)", user.id, user.role.value)
    return user
