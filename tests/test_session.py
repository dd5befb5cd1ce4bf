import pytest

from itportal.app import create_app
from itportal.config import TestingConfig
from itportal.extensions import db
from itportal.models import User, LoginAttempt
from itportal.session import ACTIVE_SESSION_KEY, is_valid_shape

from conftest import POLICIES, TOOLS, make_employee, make_admin, login_admin, login_employee


def shape(**overrides):
    data = {
        "isLoggedIn": True,
        "userRole": "EMPLOYEE",
        "firstName": "Jane",
        "lastName": "Doe",
        "agreedPolicies": ["p1"],
        "completedTools": [],
        "onboardingComplete": True,
        "userId": 1,
    }
    data.update(overrides)
    return data


def test_valid_shape():
    assert is_valid_shape(shape())
    assert is_valid_shape(shape(isLoggedIn=False, userId=None, firstName=None, lastName=None))


@pytest.mark.parametrize("overrides", [
    {"isLoggedIn": "yes"},
    {"agreedPolicies": "p1"},
    {"completedTools": [1, 2]},
    {"onboardingComplete": None},
    {"firstName": 7},
    {"userId": None},
    {"userId": "1"},
    {"userRole": "ROOT"},
])
def test_invalid_shapes(overrides):
    assert not is_valid_shape(shape(**overrides))


def test_non_dict_shape_is_invalid():
    assert not is_valid_shape(["isLoggedIn"])
    assert not is_valid_shape(None)


def test_malformed_state_is_discarded(client):
    with client.session_transaction() as sess:
        sess[ACTIVE_SESSION_KEY] = {"isLoggedIn": "yes"}
    assert client.get("/auth/session").get_json()["isLoggedIn"] is False
    with client.session_transaction() as sess:
        assert ACTIVE_SESSION_KEY not in sess


def test_state_for_deleted_user_is_discarded(app, client):
    user_id = make_employee(app)
    login_employee(client)
    with app.app_context():
        db.session.delete(db.session.get(User, user_id))
        db.session.commit()
    resp = client.get("/dashboard")
    assert resp.status_code == 302
    assert "/auth/login" in resp.headers["Location"]


def test_forged_role_is_discarded(app, client):
    user_id = make_employee(app)
    with client.session_transaction() as sess:
        sess[ACTIVE_SESSION_KEY] = shape(userId=user_id, userRole="ADMIN")
    resp = client.get("/admin/users")
    assert resp.status_code == 401
    assert client.get("/auth/session").get_json()["isLoggedIn"] is False


def test_session_survives_between_requests(app, client):
    make_employee(app)
    login_employee(client)
    with client.session_transaction() as sess:
        stored = sess[ACTIVE_SESSION_KEY]
    assert stored["isLoggedIn"] is True
    assert stored["userRole"] == "EMPLOYEE"
    assert stored["agreedPolicies"] == POLICIES
    assert stored["completedTools"] == TOOLS
    assert client.get("/dashboard").status_code == 200


def test_anonymous_is_redirected_to_login(client):
    resp = client.get("/dashboard")
    assert resp.status_code == 302
    assert resp.headers["Location"].startswith("/auth/login")
    assert client.get("/").headers["Location"].endswith("/auth/login")


def test_employee_is_redirected_away_from_admin_pages(employee_client):
    resp = employee_client.get("/admin/dashboard")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/dashboard")
    assert employee_client.get("/").headers["Location"].endswith("/dashboard")


def test_admin_reaches_admin_dashboard(app, admin_client):
    make_employee(app)
    resp = admin_client.get("/admin/dashboard")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["employees"] == {"total": 1, "onboardingComplete": 1}
    assert admin_client.get("/").headers["Location"].endswith("/admin/dashboard")


def test_employee_dashboard(employee_client):
    body = employee_client.get("/dashboard").get_json()
    assert body["user"]["firstName"] == "Jane"
    assert body["onboarding"]["isComplete"] is True
    assert body["announcements"] == []
    assert body["maintenance"] == []


def test_bearer_token_identifies_admin(app):
    make_admin(app)
    token = login_admin(app.test_client())["token"]
    client = app.test_client()
    resp = client.get("/admin/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    with client.session_transaction() as sess:
        assert ACTIVE_SESSION_KEY not in sess


def test_bad_bearer_token_is_anonymous(app):
    client = app.test_client()
    resp = client.get("/admin/users", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Unauthorized"}


def test_token_for_deleted_user_is_rejected(app):
    user_id = make_employee(app)
    token = login_employee(app.test_client())["token"]
    with app.app_context():
        db.session.delete(db.session.get(User, user_id))
        db.session.commit()
    resp = app.test_client().get("/dashboard", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 302


# -----------------------
# CSRF
# -----------------------
@pytest.fixture
def csrf_app():
    app = create_app(TestingConfig, WTF_CSRF_ENABLED=True, POLICY_IDS=POLICIES, TOOL_IDS=TOOLS, ADMIN_TOOL_IDS=[])
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


def test_cookie_requests_need_csrf_token(csrf_app):
    client = csrf_app.test_client()
    payload = {"firstName": "Jane", "lastName": "Doe", "idNumber": "123456"}
    resp = client.post("/auth/login", json=payload)
    assert resp.status_code == 400
    assert "CSRF" in resp.get_json()["message"]

    token = client.get("/auth/csrf").get_json()["csrfToken"]
    resp = client.post("/auth/login", json=payload, headers={"X-CSRFToken": token})
    assert resp.status_code == 401


def test_bearer_requests_skip_csrf(csrf_app):
    make_admin(csrf_app)
    client = csrf_app.test_client()
    token = client.get("/auth/csrf").get_json()["csrfToken"]
    bearer = login_admin_with_csrf(client, token)
    resp = csrf_app.test_client().post(
        "/announcements",
        json={"title": "Patch night", "content": "Servers reboot at 22:00"},
        headers={"Authorization": f"Bearer {bearer}"},
    )
    assert resp.status_code == 201


def login_admin_with_csrf(client, csrf_token):
    resp = client.post("/auth/login", json={"email": "admin@example.com", "password": "admin-pass-123"},
                       headers={"X-CSRFToken": csrf_token})
    assert resp.status_code == 200
    return resp.get_json()["token"]


def test_csrf_rejected_login_is_audited(csrf_app):
    client = csrf_app.test_client()
    resp = client.post("/auth/login", json={"email": "admin@example.com", "password": "guess"})
    assert resp.status_code == 400
    with csrf_app.app_context():
        recorded = LoginAttempt.query.all()
        assert [(a.attempted_identifier, a.success) for a in recorded] == [("admin@example.com", False)]


def test_csrf_rejection_elsewhere_is_not_audited(csrf_app):
    resp = csrf_app.test_client().post("/auth/logout")
    assert resp.status_code == 400
    with csrf_app.app_context():
        assert LoginAttempt.query.count() == 0


def test_employee_behind_current_catalog_is_not_complete(app, client):
    make_employee(app)
    login_employee(client)
    app.config["POLICY_IDS"] = POLICIES + ["p4"]
    state = client.get("/auth/session").get_json()
    assert state["isLoggedIn"] is True
    assert state["onboardingComplete"] is False


def test_admin_session_counts_as_onboarded(admin_client):
    assert admin_client.get("/auth/session").get_json()["onboardingComplete"] is True
