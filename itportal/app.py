# itportal/app.py: application factory with config, extensions, CSRF, sessions and blueprints.
from flask import Flask, current_app, request
from flask_wtf.csrf import CSRFError

from .config import DEFAULT_SECRET, get_config, configure_logging
from .extensions import db, migrate, csrf, limiter
from .errors import register_error_handlers
from .security import bearer_token
from .services.auth import record_rejected_login
from . import session as portal_session
from .cli import register_commands


def create_app(config=None, **overrides):
    app = Flask(__name__)
    if config is None or isinstance(config, str):
        config = get_config(config)
    app.config.from_object(config)
    app.config.update(overrides)

    if app.config.get("REQUIRE_SECRET") and app.config["SECRET_KEY"] == DEFAULT_SECRET:
        raise RuntimeError("FLASK_SECRET must be set in production")

    configure_logging(app)

    # -----------------------
    # Extensions
    # -----------------------
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    @app.before_request
    def _csrf_for_cookie_sessions():
        # bearer-token clients carry no cookie, so there is nothing to forge
        if current_app.config["WTF_CSRF_ENABLED"] and not bearer_token():
            try:
                csrf.protect()
            except CSRFError:
                if request.endpoint == "auth.login_post":
                    record_rejected_login()
                raise

    portal_session.init_app(app)
    register_error_handlers(app)

    from .routes.auth import auth_bp
    from .routes.onboarding import onboarding_bp
    from .routes.announcements import announcements_bp
    from .routes.maintenance import maintenance_bp
    from .routes.admin import admin_bp
    from .routes.pages import pages_bp

    for bp in (auth_bp, onboarding_bp, announcements_bp, maintenance_bp, admin_bp, pages_bp):
        app.register_blueprint(bp)

    register_commands(app)
    app.logger.debug("itportal app created (testing=%s)", app.testing)
    return app


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        db.create_all()
        print("\n=== Registered routes ===")
        for rule in app.url_map.iter_rules():
            print(f"{rule.endpoint:30} -> {rule.rule}")
        print("=========================\n")
    app.run(debug=app.config.get("DEBUG", False))
