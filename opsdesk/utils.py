# File: opsdesk/utils.py
from functools import wraps

from flask import request
from flask_login import current_user, login_required

from opsdesk.core.exceptions import AuthorizationError, ValidationError


def admin_required(f):
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_admin:
            raise AuthorizationError('Forbidden')
        return f(*args, **kwargs)
    return decorated_function


def manager_required(f):
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_manager:
            raise AuthorizationError('Forbidden')
        return f(*args, **kwargs)
    return decorated_function


def get_json_body():
    """Request JSON as a dict; an empty or missing body counts as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def query_int(name):
    value = request.args.get(name)
    if value in (None, ''):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f'{name} must be an integer')
