# itportal/config.py
import os
import logging
from datetime import timedelta

from dotenv import load_dotenv

# -----------------------
# Load .env from the project root (one level above the package)
# -----------------------
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
load_dotenv(dotenv_path=os.path.join(BASE_DIR, ".env"))

DEFAULT_SECRET = "dev-secret-change-me"


class Config:
    # Secret must exist for session, CSRF and bearer tokens
    SECRET_KEY = os.environ.get("FLASK_SECRET") or DEFAULT_SECRET
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URI", f"sqlite:///{os.path.join(BASE_DIR, 'itportal.db')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # werkzeug.security method string; scrypt is salted and deliberately slow
    PASSWORD_HASH_METHOD = os.environ.get("PASSWORD_HASH_METHOD", "scrypt")
    TOKEN_MAX_AGE = int(os.environ.get("TOKEN_MAX_AGE", 8 * 3600))

    REQUIRE_SECRET = False

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)

    # CSRF is enforced by a before_request hook so bearer-token clients can skip it
    WTF_CSRF_ENABLED = True
    WTF_CSRF_CHECK_DEFAULT = False

    RATELIMIT_ENABLED = True
    RATELIMIT_DEFAULT = "1000 per day;200 per hour"
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    LOGIN_RATE_LIMIT = os.environ.get("LOGIN_RATE_LIMIT", "10 per minute")
    REGISTER_RATE_LIMIT = os.environ.get("REGISTER_RATE_LIMIT", "5 per minute")

    # Catalog overrides; None means the built-in catalog in itportal.catalog
    POLICY_IDS = None
    TOOL_IDS = None
    ADMIN_TOOL_IDS = None


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "DEBUG"


class ProductionConfig(Config):
    REQUIRE_SECRET = True
    SESSION_COOKIE_SECURE = True


CONFIGS = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config(name=None):
    name = name or os.environ.get("PORTAL_CONFIG", "development")
    try:
        return CONFIGS[name]
    except KeyError:
        raise ValueError(f"Unknown configuration {name!r}; expected one of {sorted(CONFIGS)}")


def configure_logging(app):
    level = app.config.get("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    app.logger.setLevel(level)
    logging.getLogger("werkzeug").setLevel(level)
