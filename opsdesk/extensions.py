# File: opsdesk/extensions.py
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager, current_user
from flask_sqlalchemy import SQLAlchemy


def rate_limit_key():
    if current_user.is_authenticated:
        return f"user:{current_user.id}"
    return get_remote_address()


db = SQLAlchemy()
login_manager = LoginManager()
limiter = Limiter(key_func=rate_limit_key)
