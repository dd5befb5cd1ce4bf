# itportal/services/onboarding.py
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import InvalidInput, DuplicateName, DuplicateSecret
from ..forms import EmployeeDetailsForm, RegistrationForm, validated
from ..models import User, Role, name_key
from ..catalog import get_catalog


class OnboardingTracker:
    """Policy agreements and tool check-offs collected before registration.

    Pure state: nothing here touches the database until finalize().
    """

    def __init__(self, catalog, role=Role.EMPLOYEE, agreed=(), completed=()):
        self.catalog = catalog
        self.role = role
        self.agreed = list(dict.fromkeys(agreed))
        self.completed = list(dict.fromkeys(completed))

    def agree_policy(self, policy_id):
        if policy_id not in self.agreed:
            self.agreed.append(policy_id)

    def complete_tool(self, tool_id):
        if tool_id not in self.completed:
            self.completed.append(tool_id)

    def missing_policies(self):
        return [p for p in self.catalog.policy_ids if p not in self.agreed]

    def missing_tools(self):
        return [t for t in self.catalog.tool_ids(self.role) if t not in self.completed]

    @property
    def is_complete(self):
        return not self.missing_policies() and not self.missing_tools()

    def progress(self):
        policy_ids = self.catalog.policy_ids
        tool_ids = self.catalog.tool_ids(self.role)
        agreed = sum(1 for p in policy_ids if p in self.agreed)
        completed = sum(1 for t in tool_ids if t in self.completed)
        total = len(policy_ids) + len(tool_ids)
        modules = []
        for module in self.catalog.modules:
            done = sum(1 for p in module["policyIds"] if p in self.agreed)
            modules.append({
                "id": module["id"],
                "title": module["title"],
                "completed": done,
                "total": len(module["policyIds"]),
                "isComplete": done == len(module["policyIds"]),
            })
        return {
            "agreedPolicies": list(self.agreed),
            "completedTools": list(self.completed),
            "policies": {"completed": agreed, "total": len(policy_ids)},
            "tools": {"completed": completed, "total": len(tool_ids)},
            "modules": modules,
            "percentage": round(100 * (agreed + completed) / total) if total else 0,
            "isComplete": self.is_complete,
        }


def tracker_for_user(user):
    return OnboardingTracker(get_catalog(), user.role, user.agreed_policies or [], user.completed_tools or [])


def secret_in_use(secret):
    # O(n) in employee count: secrets are salted so only hash-and-compare works
    for employee in User.query.filter(User.role == Role.EMPLOYEE, User.id_number_hash.isnot(None)):
        if employee.check_id_number(secret):
            return True
    return False


def _as_list(value):
    if value is None:
        return []
    if isinstance(value, (str, int, float, dict)):
        return [value]
    return list(value)


def finalize(first_name, last_name, secret, role, agreed, completed):
    """Register a new employee from a finished onboarding run.

    Arguments are re-validated here. The caller-supplied role must be present
    but is otherwise ignored: the account is always an EMPLOYEE and is checked
    against the employee tool catalog.
    """
    payload = {
        "firstName": first_name,
        "lastName": last_name,
        "idNumber": secret,
        "userRole": role,
        "currentAgreedPolicies": _as_list(agreed),
        "currentCompletedTools": _as_list(completed),
    }
    form = validated(RegistrationForm, payload)
    first_name = form.firstName.data
    last_name = form.lastName.data
    secret = form.idNumber.data

    tracker = OnboardingTracker(get_catalog(), Role.EMPLOYEE,
                                form.currentAgreedPolicies.data, form.currentCompletedTools.data)
    errors = {}
    if tracker.missing_policies():
        errors["currentAgreedPolicies"] = ["Policies not yet agreed: " + ", ".join(tracker.missing_policies())]
    if tracker.missing_tools():
        errors["currentCompletedTools"] = ["Tools not yet completed: " + ", ".join(tracker.missing_tools())]
    if errors:
        raise InvalidInput("Onboarding is not complete", errors=errors)

    key = name_key(first_name, last_name)
    if User.query.filter_by(role=Role.EMPLOYEE, name_key=key).first() is not None:
        raise DuplicateName()
    if secret_in_use(secret):
        raise DuplicateSecret()

    user = User(
        role=Role.EMPLOYEE,
        first_name=first_name,
        last_name=last_name,
        name_key=key,
        agreed_policies=list(tracker.agreed),
        completed_tools=list(tracker.completed),
    )
    user.set_id_number(secret)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateName()

    current_app.logger.info("Registered employee %s (%s %s)", user.id, first_name, last_name)
    return user


def finalize_tracker(tracker, payload):
    """Finish an onboarding run held in the session tracker."""
    form = validated(EmployeeDetailsForm, payload)
    return finalize(
        form.firstName.data,
        form.lastName.data,
        form.idNumber.data,
        form.userRole.data or tracker.role.value,
        tracker.agreed,
        tracker.completed,
    )
