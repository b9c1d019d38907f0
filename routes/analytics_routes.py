# routes/analytics_routes.py
"""
Handles API endpoints feeding the dashboard: per-site summaries and
chart-ready time series for any measured parameter.
"""
import logging
import pandas as pd
from flask import Blueprint, jsonify, request

from database import (
    count_open_alerts, get_all_sites, get_latest_reading, get_parameter_timeseries,
    get_site, get_status_counts
)
from auth.decorators import login_required, current_user
from auth.permissions import can_access_site, visible_site_ids
from threshold_config import KNOWN_PARAMETERS
from water_quality import classify_parameter
from .request_utils import error_response

logger = logging.getLogger(__name__)

analytics_bp = Blueprint('analytics_bp', __name__)

RESAMPLE_FREQUENCIES = {'hour': 'h', 'day': 'D', 'week': 'W'}
MAX_DAYS = 366


def _site_summary(site):
    counts = get_status_counts(site['id'])
    total = sum(counts.values())
    return {
        'site_id': site['id'],
        'site_name': site['name'],
        'active_monitoring': site['active_monitoring'],
        'total_readings': total,
        'status_counts': counts,
        'normal_percentage': round(counts['normal'] / total * 100) if total else None,
        'open_alerts': count_open_alerts(site['id']),
        'latest_reading': get_latest_reading(site['id']),
    }


@analytics_bp.route('/summary', methods=['GET'])
@login_required
def api_get_summary():
    """
    Dashboard figures per site: reading counts by status, share of normal
    readings, open alerts by severity and the latest reading.
    """
    user = current_user()
    site_id = request.args.get('site_id')
    if site_id:
        if not can_access_site(user, site_id):
            return error_response("You do not have access to this site.", 403)
        site = get_site(site_id)
        if site is None:
            return error_response("Site not found.", 404)
        sites = [site]
    else:
        sites = get_all_sites(visible_site_ids(user))

    return jsonify([_site_summary(site) for site in sites])


@analytics_bp.route('/timeseries', methods=['GET'])
@login_required
def api_get_timeseries():
    """
    One chart series for one parameter of one site: raw points classified
    against the site's threshold, plus mean/min/max per period.

    Query args: site_id, parameter, days (default 30), interval (hour/day/week, default day).
    """
    site_id = request.args.get('site_id')
    parameter = request.args.get('parameter')
    interval = request.args.get('interval', 'day')
    try:
        days = int(request.args.get('days', 30))
    except ValueError:
        return error_response("days must be an integer", 400)

    if not site_id or not parameter:
        return error_response("site_id and parameter are required", 400)
    if parameter not in KNOWN_PARAMETERS:
        return error_response(f"Unknown parameter '{parameter}'.", 400)
    if interval not in RESAMPLE_FREQUENCIES:
        return error_response(f"interval must be one of {', '.join(RESAMPLE_FREQUENCIES)}", 400)
    if not 0 < days <= MAX_DAYS:
        return error_response(f"days must be between 1 and {MAX_DAYS}", 400)
    if not can_access_site(current_user(), site_id):
        return error_response("You do not have access to this site.", 403)

    site = get_site(site_id)
    if site is None:
        return error_response("Site not found.", 404)
    threshold = site['thresholds'].get(parameter)

    try:
        df = get_parameter_timeseries(site_id, parameter, days=days)
    except Exception as e:
        logger.exception("Error building time series for %s/%s", site_id, parameter)
        return error_response(str(e), 500)

    points = [
        {
            'timestamp': timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            'value': float(value),
            'status': classify_parameter(value, threshold) if threshold else None,
        }
        for timestamp, value in df['value'].items()
    ]

    aggregates = []
    if not df.empty:
        resampled = df['value'].resample(RESAMPLE_FREQUENCIES[interval]).agg(['mean', 'min', 'max', 'count'])
        resampled = resampled[resampled['count'] > 0]
        for period, row in resampled.iterrows():
            aggregates.append({
                'period': period.strftime("%Y-%m-%d %H:%M:%S"),
                'mean': round(float(row['mean']), 3),
                'min': float(row['min']),
                'max': float(row['max']),
                'count': int(row['count']),
            })

    statistics = None
    if not df.empty:
        values = df['value']
        statistics = {
            'mean': round(float(values.mean()), 3),
            'min': float(values.min()),
            'max': float(values.max()),
            'std': round(float(values.std()), 3) if len(values) > 1 and pd.notna(values.std()) else None,
            'count': int(values.count()),
        }

    return jsonify({
        'site_id': site_id,
        'parameter': parameter,
        'threshold': threshold,
        'interval': interval,
        'points': points,
        'aggregates': aggregates,
        'statistics': statistics,
    })
