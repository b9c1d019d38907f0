# routes/site_routes.py
"""
Handles API endpoints for mining sites and their water quality thresholds.
"""
from flask import Blueprint, jsonify, request
from database import (
    SiteNotFoundError, add_activity_log, delete_threshold, get_all_sites, get_site,
    restore_default_thresholds, set_threshold
)
from auth.decorators import login_required, role_required, current_user
from auth.permissions import ADMIN, can_access_site, visible_site_ids
from threshold_config import KNOWN_PARAMETERS
from validation import ReadingValidationError, validate_threshold_payload
from .request_utils import error_response

site_bp = Blueprint('site_bp', __name__)


def _site_or_error(site_id):
    """Returns (site, None) or (None, error response) after the access and existence checks."""
    if not can_access_site(current_user(), site_id):
        return None, error_response("You do not have access to this site.", 403)
    site = get_site(site_id)
    if site is None:
        return None, error_response("Site not found.", 404)
    return site, None


@site_bp.route('/sites', methods=['GET'])
@login_required
def api_get_sites():
    """Lists the sites the current user may see, each with its thresholds."""
    return jsonify(get_all_sites(visible_site_ids(current_user())))


@site_bp.route('/sites/<site_id>', methods=['GET'])
@login_required
def api_get_site(site_id):
    site, error = _site_or_error(site_id)
    if error:
        return error
    return jsonify(site)


@site_bp.route('/sites/<site_id>/thresholds', methods=['GET'])
@login_required
def api_get_thresholds(site_id):
    """Fetches a site's thresholds keyed by parameter name."""
    site, error = _site_or_error(site_id)
    if error:
        return error
    return jsonify(site['thresholds'])


@site_bp.route('/sites/<site_id>/thresholds/<parameter>', methods=['PUT'])
@role_required(ADMIN)
def api_update_threshold(site_id, parameter):
    """Sets the min/max values of one parameter. A null bound leaves that side unbounded."""
    if parameter not in KNOWN_PARAMETERS:
        return error_response(f"Unknown parameter '{parameter}'.", 400)
    try:
        bounds = validate_threshold_payload(request.get_json(silent=True))
    except ReadingValidationError as e:
        return error_response(str(e), 400, errors=e.errors)

    try:
        set_threshold(site_id, parameter, bounds['min'], bounds['max'])
    except SiteNotFoundError as e:
        return error_response(str(e), 404)

    add_activity_log(
        user_id=current_user()['id'], action_type='UPDATE', resource_type='thresholds',
        resource_id=site_id, status='Success', ip_address=request.remote_addr,
        details={'parameter': parameter, **bounds}
    )
    return jsonify({"status": "success", "message": "Threshold updated.", "threshold": bounds})


@site_bp.route('/sites/<site_id>/thresholds/<parameter>', methods=['DELETE'])
@role_required(ADMIN)
def api_delete_threshold(site_id, parameter):
    """Stops evaluating a parameter for a site."""
    if not delete_threshold(site_id, parameter):
        return error_response("Threshold not found.", 404)
    add_activity_log(
        user_id=current_user()['id'], action_type='DELETE', resource_type='thresholds',
        resource_id=site_id, status='Success', ip_address=request.remote_addr,
        details={'parameter': parameter}
    )
    return jsonify({"status": "success", "message": "Threshold deleted."})


@site_bp.route('/sites/<site_id>/thresholds/restore', methods=['POST'])
@role_required(ADMIN)
def api_restore_thresholds(site_id):
    """Restores a site's thresholds to their default values."""
    try:
        restore_default_thresholds(site_id)
    except SiteNotFoundError as e:
        return error_response(str(e), 404)

    add_activity_log(
        user_id=current_user()['id'], action_type='RESTORE', resource_type='thresholds',
        resource_id=site_id, status='Success', ip_address=request.remote_addr
    )
    return jsonify({"status": "success", "message": "Default thresholds restored."})
