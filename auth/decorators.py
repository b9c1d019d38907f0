# auth/decorators.py
from functools import wraps
from flask import session, jsonify, g

from database import get_user_by_id
from .permissions import has_permission


def current_user():
    """
    Returns the logged-in user (with role and site access) for this request,
    loading it from the database once per request. None if nobody is logged in.
    """
    if 'user' not in g:
        user_id = session.get('user_id')
        g.user = get_user_by_id(user_id) if user_id else None
    return g.user


def login_required(f):
    """
    A decorator to protect API routes, ensuring a user is logged in and still active.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = current_user()
        if user is None or user.get('status') != 'Active':
            session.clear()
            return jsonify({"status": "error", "message": "Authentication required."}), 401
        return f(*args, **kwargs)
    return decorated_function


def role_required(*allowed_roles):
    """
    A decorator to protect routes, ensuring the logged-in user has one of the allowed roles.
    """
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if current_user()['role'] not in allowed_roles:
                return jsonify({"status": "error", "message": "You do not have permission to access this resource."}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def min_role_required(required_role):
    """
    Like role_required, but accepts any role ranking at least as high as
    required_role in the role hierarchy.
    """
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if not has_permission(current_user()['role'], required_role):
                return jsonify({"status": "error", "message": "You do not have permission to access this resource."}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator
