# routes/alerts_routes.py
"""
Handles API endpoints for listing and acknowledging alerts.
"""
from flask import Blueprint, jsonify, request
from database import (
    AlertAlreadyAcknowledgedError, AlertNotFoundError, acknowledge_alert, add_activity_log,
    get_alert, get_alerts
)
from auth.decorators import login_required, min_role_required, current_user
from auth.permissions import SITE_AGENT, can_access_site, visible_site_ids
from water_quality import SEVERITY_LEVELS
from .request_utils import (
    BadRequest, error_response, get_bool_arg, get_date_arg, get_pagination, pagination_envelope
)

# A Blueprint is created to organize all alert-related routes.
alerts_bp = Blueprint('alerts_bp', __name__)


@alerts_bp.route('/alerts', methods=['GET'])
@login_required
def api_get_alerts():
    """
    Fetches alerts, newest first, filtered by site_id, severity, acknowledged,
    start_date and end_date, with limit/offset pagination.
    """
    user = current_user()
    site_id = request.args.get('site_id')
    severity = request.args.get('severity')
    try:
        acknowledged = get_bool_arg('acknowledged')
        limit, offset = get_pagination()
        start_date = get_date_arg('start_date')
        end_date = get_date_arg('end_date', end_of_day=True)
    except BadRequest as e:
        return error_response(str(e), 400)

    if severity and severity not in SEVERITY_LEVELS:
        return error_response(f"severity must be one of {', '.join(SEVERITY_LEVELS)}", 400)
    if site_id and not can_access_site(user, site_id):
        return error_response("You do not have access to this site.", 403)

    alerts, total = get_alerts(
        site_id=site_id, site_ids=None if site_id else visible_site_ids(user),
        severity=severity, acknowledged=acknowledged,
        start_date=start_date, end_date=end_date, limit=limit, offset=offset
    )
    return jsonify({"alerts": alerts, "pagination": pagination_envelope(total, limit, offset)})


@alerts_bp.route('/alerts/<alert_id>/acknowledge', methods=['PUT'])
@min_role_required(SITE_AGENT)
def api_acknowledge_alert(alert_id):
    """Marks an alert as acknowledged by the current user. An alert can be acknowledged only once."""
    user = current_user()
    alert = get_alert(alert_id)
    if alert is None:
        return error_response("Alert not found.", 404)
    if not can_access_site(user, alert['site_id']):
        return error_response("You do not have access to this alert.", 403)

    try:
        acknowledge_alert(alert_id, user['id'])
    except AlertNotFoundError as e:
        return error_response(str(e), 404)
    except AlertAlreadyAcknowledgedError as e:
        add_activity_log(
            user_id=user['id'], action_type='ACKNOWLEDGE', resource_type='alerts',
            resource_id=alert_id, status='Failure', ip_address=request.remote_addr,
            details={'error': str(e)}
        )
        return error_response(str(e), 400)

    add_activity_log(
        user_id=user['id'], action_type='ACKNOWLEDGE', resource_type='alerts',
        resource_id=alert_id, status='Success', ip_address=request.remote_addr,
        details='Acknowledged alert'
    )
    return jsonify({"status": "success", "message": "Alert acknowledged successfully.",
                    "alert": get_alert(alert_id)})
