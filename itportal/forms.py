# itportal/forms.py
# JSON request bodies are validated with Flask-WTF forms; form.errors gives
# the field-level {"field": [messages]} structure returned to clients.
from datetime import datetime, timezone

from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import ImmutableMultiDict
from wtforms import Field, StringField, BooleanField
from wtforms.validators import DataRequired, Email, Length, Regexp, Optional, StopValidation

from .errors import InvalidInput
from .models import MaintenanceEventType


def to_text(value):
    if value is None:
        return None
    return str(value).strip()


def to_raw_text(value):
    return None if value is None else str(value)


def parse_iso_datetime(value):
    """Parse an ISO-8601 string into a naive UTC datetime."""
    if not isinstance(value, str):
        raise ValueError("expected a string")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class StringListField(Field):
    """Ordered, de-duplicated list of non-empty strings from a JSON array."""

    def process_formdata(self, valuelist):
        items = (to_text(v) for v in valuelist if v is not None)
        self.data = list(dict.fromkeys(v for v in items if v))


class IsoDateTimeField(Field):
    def __init__(self, label=None, validators=None, required=False,
                 required_message="This field is required.", invalid_message="Invalid date format", **kwargs):
        super().__init__(label, validators, **kwargs)
        self.required = required
        self.required_message = required_message
        self.invalid_message = invalid_message

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] in (None, ""):
            self.data = None
            return
        try:
            self.data = parse_iso_datetime(valuelist[0])
        except (TypeError, ValueError, OverflowError):
            self.data = None
            raise ValueError(self.invalid_message)

    def pre_validate(self, form):
        if self.required and self.data is None and not self.process_errors:
            raise StopValidation(self.required_message)


class EnumField(Field):
    def __init__(self, label=None, validators=None, enum=None, required=False,
                 invalid_message="Not a valid choice", **kwargs):
        super().__init__(label, validators, **kwargs)
        self.enum = enum
        self.required = required
        self.invalid_message = invalid_message

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] in (None, ""):
            self.data = None
            return
        try:
            self.data = self.enum(to_text(valuelist[0]).upper())
        except ValueError:
            self.data = None
            raise ValueError(self.invalid_message)

    def pre_validate(self, form):
        if self.required and self.data is None and not self.process_errors:
            raise StopValidation(self.invalid_message)


# -----------------------
# Auth
# -----------------------
class EmployeeLoginForm(FlaskForm):
    firstName = StringField(filters=[to_text], validators=[DataRequired("First name is required")])
    lastName = StringField(filters=[to_text], validators=[DataRequired("Last name is required")])
    idNumber = StringField(filters=[to_text], validators=[DataRequired("ID Number (password) is required")])


class AdminLoginForm(FlaskForm):
    email = StringField(filters=[to_text], validators=[
        DataRequired("Email is required"),
        Email("Invalid email format", check_deliverability=False),
    ])
    password = StringField(filters=[to_raw_text], validators=[DataRequired("Password is required")])


class EmployeeDetailsForm(FlaskForm):
    firstName = StringField(filters=[to_text], validators=[DataRequired("First name is required"), Length(max=120)])
    lastName = StringField(filters=[to_text], validators=[DataRequired("Last name is required"), Length(max=120)])
    idNumber = StringField(filters=[to_text], validators=[
        DataRequired("ID number is required"),
        Regexp(r"^[0-9]+\Z", message="Password must contain only digits"),
        Length(min=6, max=8, message="Password must be 6 to 8 digits long"),
    ])
    userRole = StringField(filters=[to_text], validators=[Optional()])


class RegistrationForm(EmployeeDetailsForm):
    userRole = StringField(filters=[to_text], validators=[DataRequired("User role is required")])
    currentAgreedPolicies = StringListField(validators=[DataRequired("At least one policy must be agreed to")])
    currentCompletedTools = StringListField(validators=[DataRequired("At least one tool must be completed")])


# -----------------------
# Admin content
# -----------------------
class AnnouncementForm(FlaskForm):
    title = StringField(filters=[to_text], validators=[
        DataRequired("Title is required"),
        Length(max=255, message="Title must be at most 255 characters"),
    ])
    content = StringField(filters=[to_text], validators=[DataRequired("Content is required")])
    isActive = BooleanField(false_values=(False, "false", "", None))


class MaintenanceEventForm(FlaskForm):
    title = StringField(filters=[to_text], validators=[
        DataRequired("Title is required"),
        Length(max=255, message="Title must be at most 255 characters"),
    ])
    description = StringField(filters=[to_text], validators=[Optional()])
    startDate = IsoDateTimeField(required=True, required_message="Start date is required",
                                 invalid_message="Invalid start date format")
    endDate = IsoDateTimeField(invalid_message="Invalid end date format")
    type = EnumField(enum=MaintenanceEventType, required=True, invalid_message="Invalid maintenance type")

    def validate_endDate(self, field):
        start = self.startDate.data if "startDate" in self else None
        if field.data is not None and start is not None and field.data < start:
            raise StopValidation("End date must not be before the start date")


# -----------------------
# Helpers
# -----------------------
def json_payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInput("Invalid JSON payload")
    return data


def load_form(form_cls, payload, partial=False):
    """Bind a JSON object to a form; partial forms keep only the supplied fields."""
    form = form_cls(formdata=ImmutableMultiDict(payload), meta={"csrf": False})
    if partial:
        for name in [f.name for f in form]:
            if name not in payload:
                del form[name]
    return form


def validated(form_cls, payload, partial=False):
    form = load_form(form_cls, payload, partial=partial)
    if not form.validate():
        raise InvalidInput("Validation failed", errors=form.errors)
    return form


# largest value a signed 64-bit primary key column holds
MAX_ID = 2 ** 63 - 1


def parse_id(value, message):
    try:
        parsed = int(value, 10)
    except (TypeError, ValueError):
        raise InvalidInput(message)
    if parsed < 1 or parsed > MAX_ID:
        raise InvalidInput(message)
    return parsed
