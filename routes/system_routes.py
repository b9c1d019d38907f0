# routes/system_routes.py
"""
Contains routes for system-level settings, the activity log, and the list
of measurable parameters used to build the data-entry form.
"""
from flask import Blueprint, jsonify, request
from database import add_activity_log, get_activity_logs, get_session_timeout, set_session_timeout
from auth.decorators import login_required, role_required, current_user
from auth.permissions import ADMIN
from config import DEFAULT_SESSION_TIMEOUT_MINUTES
from threshold_config import BIOLOGICAL, HEAVY_METALS, OTHER_CHEMICALS, PHYSICO_CHEMICAL
from .request_utils import error_response

system_bp = Blueprint('system_bp', __name__)


@system_bp.route('/system/settings', methods=['GET'])
@login_required
def api_get_settings():
    """Fetches the system settings."""
    return jsonify({
        'sessionTimeout': get_session_timeout(DEFAULT_SESSION_TIMEOUT_MINUTES),
    })


@system_bp.route('/system/settings', methods=['PUT'])
@role_required(ADMIN)
def api_update_settings():
    """Updates the system settings. A new session timeout takes effect when the application restarts."""
    data = request.get_json(silent=True)
    if not data:
        return error_response('Request body cannot be empty.', 400)

    timeout = data.get('sessionTimeout')
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, int) or not 1 <= timeout <= 1440:
            return error_response('sessionTimeout must be a number of minutes between 1 and 1440.', 400)
        set_session_timeout(timeout)

    add_activity_log(
        user_id=current_user()['id'], action_type='UPDATE', resource_type='settings',
        resource_id=None, status='Success', ip_address=request.remote_addr, details=data
    )
    return jsonify({'status': 'success', 'message': 'Settings updated successfully.'})


@system_bp.route('/activity', methods=['GET'])
@role_required(ADMIN)
def api_get_activity():
    """Retrieves activity log entries, filtered by user and action."""
    try:
        limit = int(request.args.get('limit', 200))
    except ValueError:
        return error_response('limit must be an integer', 400)
    logs = get_activity_logs(
        user_filter=request.args.get('user'),
        action_filter=request.args.get('action'),
        limit=max(1, min(limit, 1000)),
    )
    return jsonify(logs)


@system_bp.route('/parameters', methods=['GET'])
@login_required
def api_get_parameters():
    """Lists the measurable parameters, grouped the way the data-entry form shows them."""
    return jsonify({
        'physico_chemical': PHYSICO_CHEMICAL,
        'biological': BIOLOGICAL,
        'heavy_metals': HEAVY_METALS,
        'other_chemicals': OTHER_CHEMICALS,
    })
