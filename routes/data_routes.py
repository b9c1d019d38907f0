# routes/data_routes.py
"""
Handles API endpoints for water quality readings: data entry and listing.
"""
import logging
import uuid
from flask import Blueprint, jsonify, request
from database import (
    add_activity_log, get_alerts_for_reading, get_reading, get_readings, get_site, insert_reading
)
from auth.decorators import login_required, role_required, current_user
from auth.permissions import DATA_ENTRY_ROLES, can_access_site, visible_site_ids
from validation import ReadingValidationError, validate_reading_payload
from water_quality import STATUS_ORDER, classify_reading, generate_alerts
from .request_utils import (
    BadRequest, error_response, get_date_arg, get_pagination, pagination_envelope
)

logger = logging.getLogger(__name__)

data_bp = Blueprint('data_bp', __name__)


@data_bp.route('/data', methods=['GET'])
@login_required
def api_get_readings():
    """
    Lists readings, newest first. Supports site_id, status, start_date and
    end_date filters plus limit/offset pagination. Users who do not see every
    site only get readings from the sites they have access to.
    """
    user = current_user()
    site_id = request.args.get('site_id')
    status = request.args.get('status')
    try:
        limit, offset = get_pagination()
        start_date = get_date_arg('start_date')
        end_date = get_date_arg('end_date', end_of_day=True)
    except BadRequest as e:
        return error_response(str(e), 400)

    if status and status not in STATUS_ORDER:
        return error_response(f"status must be one of {', '.join(STATUS_ORDER)}", 400)
    if site_id and not can_access_site(user, site_id):
        return error_response("You do not have access to this site.", 403)

    readings, total = get_readings(
        site_id=site_id, site_ids=None if site_id else visible_site_ids(user),
        status=status, start_date=start_date, end_date=end_date, limit=limit, offset=offset
    )
    return jsonify({"data": readings, "pagination": pagination_envelope(total, limit, offset)})


@data_bp.route('/data/<reading_id>', methods=['GET'])
@login_required
def api_get_reading(reading_id):
    """Fetches a single reading with the alerts it raised."""
    reading = get_reading(reading_id)
    if reading is None:
        return error_response("Reading not found.", 404)
    if not can_access_site(current_user(), reading['site_id']):
        return error_response("You do not have access to this reading.", 403)
    return jsonify(reading)


@data_bp.route('/data', methods=['POST'])
@role_required(*DATA_ENTRY_ROLES)
def api_add_reading():
    """
    Accepts a new reading from the data-entry form: validates it, classifies
    it against the site's thresholds, and stores it together with any alerts.
    """
    user = current_user()
    try:
        reading = validate_reading_payload(request.get_json(silent=True))
    except ReadingValidationError as e:
        return error_response(str(e), 400, errors=e.errors)

    site = get_site(reading['site_id'])
    if site is None:
        return error_response("Site not found.", 404)
    if not can_access_site(user, site['id']):
        return error_response("You do not have access to this site.", 403)

    reading['id'] = str(uuid.uuid4())
    reading['collected_by'] = user['id']

    thresholds = site['thresholds']
    result = classify_reading(reading, thresholds)
    alerts = generate_alerts(reading, result['per_parameter'], thresholds)

    try:
        insert_reading(reading, result['overall'], result['per_parameter'], alerts)
    except Exception as e:
        logger.exception("Failed to store reading for site %s", site['id'])
        add_activity_log(
            user_id=user['id'], action_type='CREATE', resource_type='water_quality_data',
            resource_id=reading['id'], status='Failure', ip_address=request.remote_addr,
            details={'error': str(e)}
        )
        return error_response("The reading could not be saved.", 500)

    add_activity_log(
        user_id=user['id'], action_type='CREATE', resource_type='water_quality_data',
        resource_id=reading['id'], status='Success', ip_address=request.remote_addr,
        details=f"Added new water quality data for site {site['id']} with status {result['overall']}"
    )
    return jsonify({
        "id": reading['id'],
        "message": "Water quality data added successfully",
        "status": result['overall'],
        "parameter_status": result['per_parameter'],
        "alerts_generated": bool(alerts),
        "alerts": get_alerts_for_reading(reading['id']),
    }), 201
