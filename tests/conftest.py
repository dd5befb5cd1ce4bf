import pytest

from itportal.app import create_app
from itportal.config import TestingConfig
from itportal.extensions import db
from itportal.models import User, Role
from itportal.services.onboarding import finalize

POLICIES = ["p1", "p2", "p3"]
TOOLS = ["t1", "t2"]
ADMIN_TOOLS = ["t_admin"]

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin-pass-123"


@pytest.fixture
def app():
    app = create_app(TestingConfig, POLICY_IDS=POLICIES, TOOL_IDS=TOOLS, ADMIN_TOOL_IDS=ADMIN_TOOLS)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_employee(app, first="Jane", last="Doe", secret="123456", agreed=None, completed=None):
    with app.test_request_context():
        user = finalize(first, last, secret, "EMPLOYEE",
                        POLICIES if agreed is None else agreed,
                        TOOLS if completed is None else completed)
        return user.id


def make_admin(app, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    with app.test_request_context():
        admin = User(role=Role.ADMIN, email=email, agreed_policies=[], completed_tools=[])
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
        return admin.id


def login_admin(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def login_employee(client, first="Jane", last="Doe", secret="123456"):
    resp = client.post("/auth/login", json={"firstName": first, "lastName": last, "idNumber": secret})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


@pytest.fixture
def admin_client(app, client):
    make_admin(app)
    login_admin(client)
    return client


@pytest.fixture
def employee_client(app, client):
    make_employee(app)
    login_employee(client)
    return client
