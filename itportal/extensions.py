# itportal/extensions.py
# Unbound extension objects; create_app() binds them to the configured app.
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()

# limits and storage come from RATELIMIT_* config keys
limiter = Limiter(key_func=get_remote_address)
