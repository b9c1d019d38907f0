# routes/auth_routes.py
"""
Handles login, logout and the current-user endpoint.
"""
from flask import Blueprint, jsonify, request, session
from database import (
    add_activity_log, get_user_by_id, get_user_for_login, update_last_login, verify_password
)
from auth.decorators import login_required, current_user
from .request_utils import error_response

auth_bp = Blueprint('auth_bp', __name__)


@auth_bp.route('/auth/login', methods=['POST'])
def login():
    """Checks email and password and starts a session. Returns the logged-in user."""
    data = request.get_json(silent=True) or {}
    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return error_response("Email and password are required.", 400)

    user = get_user_for_login(email)
    if user and verify_password(user['hashed_password'], password, user['salt']):
        update_last_login(user['id'])
        add_activity_log(
            user_id=user['id'], action_type='LOGIN', resource_type='auth', resource_id=None,
            status='Success', ip_address=request.remote_addr, details='User logged in'
        )
        session.clear()
        session['user_id'] = user['id']
        session['user_role'] = user['role']
        return jsonify(get_user_by_id(user['id']))

    add_activity_log(
        user_id=user['id'] if user else None, action_type='LOGIN', resource_type='auth',
        resource_id=None, status='Failure', ip_address=request.remote_addr,
        details={'email': email, 'reason': 'Invalid credentials'}
    )
    return error_response("Invalid email or password.", 401)


@auth_bp.route('/auth/logout', methods=['POST'])
@login_required
def logout():
    """Clears the session and logs the user out."""
    add_activity_log(
        user_id=session.get('user_id'), action_type='LOGOUT', resource_type='auth',
        resource_id=None, status='Success', ip_address=request.remote_addr
    )
    session.clear()
    return jsonify({"status": "success", "message": "You have been successfully logged out."})


@auth_bp.route('/auth/user', methods=['GET'])
@login_required
def get_current_user():
    """Returns the logged-in user with role and site access."""
    return jsonify(current_user())
