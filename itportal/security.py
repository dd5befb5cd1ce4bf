# itportal/security.py
from flask import current_app, request
from werkzeug.security import generate_password_hash, check_password_hash
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

TOKEN_SALT = "itportal-session"


def hash_secret(secret):
    method = current_app.config.get("PASSWORD_HASH_METHOD", "scrypt")
    return generate_password_hash(secret, method=method)


def verify_secret(secret_hash, secret):
    if not secret_hash or secret is None:
        return False
    return check_password_hash(secret_hash, secret)


def burn_hash_time(secret):
    """Spend one hash computation so unknown identifiers cost as much as wrong secrets."""
    check_password_hash(_dummy_hash(), secret or "")


def _dummy_hash():
    cache = current_app.extensions.setdefault("itportal", {})
    method = current_app.config.get("PASSWORD_HASH_METHOD", "scrypt")
    if cache.get("dummy_method") != method:
        cache["dummy_hash"] = generate_password_hash("not-a-real-secret", method=method)
        cache["dummy_method"] = method
    return cache["dummy_hash"]


# -----------------------
# Bearer tokens
# -----------------------
def _serializer():
    return URLSafeTimedSerializer(current_app.secret_key, salt=TOKEN_SALT)


def issue_token(user):
    return _serializer().dumps({"uid": user.id, "role": user.role.value})


def read_token(token):
    """Return the token payload, or None when it is forged, malformed or expired."""
    try:
        data = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired:
        current_app.logger.info("Rejected expired bearer token")
        return None
    except BadSignature:
        current_app.logger.warning("Rejected bearer token with bad signature")
        return None
    if not isinstance(data, dict) or not isinstance(data.get("uid"), int):
        return None
    return data


def bearer_token():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


# -----------------------
# Client details for the audit log
# -----------------------
def client_ip():
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("X-Real-IP") or request.remote_addr or "N/A"


def client_user_agent():
    return request.headers.get("User-Agent") or "N/A"
